"""
Pydantic schemas for API request/response validation.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from enum import Enum
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PassReportSchema(BaseModel):
    index: int
    flavor: str
    pages: List[int] = []
    status: str
    tables_attached: int = 0
    tables_rejected: int = 0
    words_removed: int = 0
    error: Optional[str] = None


class ProcessingResult(BaseModel):
    request_id: str
    status: ProcessingStatus
    processing_time_ms: float
    page_count: int = 0
    tables_detected: int = 0
    words_removed: int = 0
    passes: List[PassReportSchema] = []
    document: Optional[Dict[str, Any]] = None
    errors: List[str] = []


# Operational Schemas
class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: datetime


class ReadinessResponse(BaseModel):
    status: str
    detector_available: bool
    details: Dict[str, Any] = {}


class InfoResponse(BaseModel):
    app_name: str
    version: str
    git_commit: str
    build_date: str
    detector: str
    python_version: str


class MetricsResponse(BaseModel):
    requests_total: int
    requests_success: int
    requests_failed: int
    tables_detected: int
    avg_processing_time_ms: float
    uptime_seconds: float


class ErrorResponse(BaseModel):
    error: str
    detail: str
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
