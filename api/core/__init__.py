# Core module exports
from . import config
from .logging import (
    setup_logging,
    get_logger,
    init_logger,
    generate_request_id,
    set_request_id,
    get_request_id,
)
