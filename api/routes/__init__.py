from .operations import router as operations_router
from .documents import router as documents_router
