"""
Table detection routes.
"""
import json
import os
import shutil
import tempfile
import time
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from api.schemas import ProcessingResult, ProcessingStatus
from api.core import config, get_logger, generate_request_id, set_request_id
from api.services import DocumentProcessor, get_processor
from api.routes.operations import record_request, REQUEST_COUNT, REQUEST_LATENCY
from app.builders import document_from_dict
from app.extractors import TableDetectionOptions

router = APIRouter(prefix="/v1", tags=["Table Detection"])
logger = get_logger("dla.documents")

ALLOWED_PDF = {".pdf"}
ENDPOINT = "/v1/tables/detect"


def validate_ext(filename: str, allowed: set) -> bool:
    return os.path.splitext(filename or "")[1].lower() in allowed


async def save_file(upload: UploadFile, dest: str) -> int:
    data = await upload.read()
    with open(dest, "wb") as f:
        f.write(data)
    return len(data)


def parse_run_config(run_config: Optional[str]) -> Optional[TableDetectionOptions]:
    """Detection passes from the form field: a JSON list of run configs, or None for the defaults."""
    if not run_config:
        return None
    try:
        return TableDetectionOptions(runConfig=json.loads(run_config))
    except ValueError as e:
        raise HTTPException(400, f"Invalid run_config: {e}")


@router.post(
    "/tables/detect", response_model=ProcessingResult, summary="Detect Tables in a Document"
)
async def detect_tables(
    file: UploadFile = File(..., description="The PDF the document was extracted from"),
    document: str = Form(..., description="Document JSON with the pages' words"),
    run_config: Optional[str] = Form(None, description="JSON list of detection passes"),
    processor: DocumentProcessor = Depends(get_processor),
):
    """Add detected tables to an extracted document and return the updated document."""
    request_id = generate_request_id()
    set_request_id(request_id)
    start = time.time()
    REQUEST_COUNT.labels(method="POST", endpoint=ENDPOINT, status="started").inc()

    logger.info(f"Detecting tables: {file.filename}", extra={"extra_data": {"request_id": request_id}})

    if not validate_ext(file.filename, ALLOWED_PDF):
        logger.warning(f"Invalid file type: {file.filename}")
        raise HTTPException(400, "Invalid file type. Expected PDF.")

    try:
        doc = document_from_dict(json.loads(document))
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"Invalid document JSON: {e}")
        raise HTTPException(400, f"Invalid document: {e}")

    options = parse_run_config(run_config)

    temp_dir = tempfile.mkdtemp(prefix="dla_tables_")
    try:
        input_path = os.path.join(temp_dir, os.path.basename(file.filename))
        size = await save_file(file, input_path)
        if size > config.MAX_FILE_SIZE_MB * 1024 * 1024:
            raise HTTPException(413, f"File larger than {config.MAX_FILE_SIZE_MB}MB")
        doc.inputFile = input_path

        result = await processor.process_document(doc, options, request_id)

        processing_time = (time.time() - start) * 1000
        success = result.status == ProcessingStatus.COMPLETED
        record_request(success, processing_time, result)

        REQUEST_COUNT.labels(method="POST", endpoint=ENDPOINT, status="success" if success else "failed").inc()
        REQUEST_LATENCY.labels(endpoint=ENDPOINT).observe(time.time() - start)

        logger.info(f"Tables detected: {result.tables_detected}", extra={"extra_data": {
            "request_id": request_id, "time_ms": processing_time
        }})
        return result
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Table detection request failed: {e}")
        record_request(False)
        raise HTTPException(500, str(e))
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)
