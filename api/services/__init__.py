from .processor import (
    DocumentProcessor,
    default_options,
    get_processor,
    initialize_processor,
    shutdown_processor,
)
