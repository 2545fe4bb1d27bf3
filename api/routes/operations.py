"""
Operational endpoints: /health, /ready, /metrics, /info
Essential for Kubernetes and monitoring.
"""
import sys
import time
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Response
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST

from api.schemas import HealthResponse, ReadinessResponse, InfoResponse, MetricsResponse, ProcessingResult
from api.core import config, get_logger
from api.services import DocumentProcessor, get_processor

router = APIRouter(tags=["Operations"])
logger = get_logger("dla.operations")

# Prometheus metrics
REQUEST_COUNT = Counter("dla_requests_total", "Total requests", ["method", "endpoint", "status"])
REQUEST_LATENCY = Histogram("dla_request_latency_seconds", "Request latency", ["endpoint"])
DOCUMENTS_PROCESSED = Counter("dla_documents_processed_total", "Documents processed", ["status"])
TABLES_ATTACHED = Counter("dla_tables_attached_total", "Tables attached to documents")
TABLES_REJECTED = Counter("dla_tables_rejected_total", "Candidate tables rejected as false tables")
DETECTION_PASSES = Counter("dla_detection_passes_total", "Detector passes run", ["status"])
DETECTOR_AVAILABLE = Gauge("dla_detector_available", "Table detector availability")

START_TIME = time.time()
_metrics = {"requests_total": 0, "requests_success": 0, "requests_failed": 0,
            "tables_detected": 0, "total_processing_time_ms": 0.0}


def record_request(success: bool, processing_time_ms: float = 0, result: ProcessingResult = None):
    _metrics["requests_total"] += 1
    if success:
        _metrics["requests_success"] += 1
        DOCUMENTS_PROCESSED.labels(status="success").inc()
    else:
        _metrics["requests_failed"] += 1
        DOCUMENTS_PROCESSED.labels(status="failed").inc()
    _metrics["total_processing_time_ms"] += processing_time_ms

    if result is not None:
        _metrics["tables_detected"] += result.tables_detected
        for report in result.passes:
            DETECTION_PASSES.labels(status=report.status).inc()
            TABLES_ATTACHED.inc(report.tables_attached)
            TABLES_REJECTED.inc(report.tables_rejected)


@router.get("/health", response_model=HealthResponse, summary="Liveness Check")
async def health_check() -> HealthResponse:
    """Liveness check: always returns 200 if process is running."""
    logger.debug("Health check called")
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness Check")
async def readiness_check(processor: DocumentProcessor = Depends(get_processor)) -> ReadinessResponse:
    """Readiness check: ready once the processor is initialized and the detector importable."""
    detector_available = processor.detector_available

    DETECTOR_AVAILABLE.set(1 if detector_available else 0)
    status = "ready" if (processor.is_ready and detector_available) else "not_ready"

    logger.info(f"Readiness check: {status}", extra={"extra_data": {"detector_available": detector_available}})

    return ReadinessResponse(
        status=status,
        detector_available=detector_available,
        details={"detector_python": config.DETECTOR_PYTHON, "uptime_seconds": time.time() - START_TIME}
    )


@router.get("/metrics", summary="Prometheus Metrics")
async def prometheus_metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/metrics/json", response_model=MetricsResponse, summary="JSON Metrics")
async def json_metrics() -> MetricsResponse:
    avg = _metrics["total_processing_time_ms"] / max(_metrics["requests_total"], 1)
    return MetricsResponse(
        requests_total=_metrics["requests_total"],
        requests_success=_metrics["requests_success"],
        requests_failed=_metrics["requests_failed"],
        tables_detected=_metrics["tables_detected"],
        avg_processing_time_ms=avg,
        uptime_seconds=time.time() - START_TIME
    )


@router.get("/info", response_model=InfoResponse, summary="API Metadata")
async def api_info() -> InfoResponse:
    return InfoResponse(
        app_name=config.APP_NAME,
        version=config.APP_VERSION,
        git_commit=config.GIT_COMMIT,
        build_date=config.BUILD_DATE,
        detector="camelot",
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    )
