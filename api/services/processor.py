"""
Table detection service running the stage off the event loop.
"""
import asyncio
import importlib.util
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from api.core import config, get_logger
from api.schemas import PassReportSchema, ProcessingResult, ProcessingStatus
from app.builders import document_to_dict
from app.engines import PassReport, TableDetectionEngine
from app.extractors import CamelotExtractor, RunConfig, TableDetectionOptions, TableExtractor
from app.models import Document, Table

logger = get_logger("dla.processor")


def default_options() -> TableDetectionOptions:
    """Detection passes configured through TABLE_DETECTION_CONFIG."""
    return TableDetectionOptions(runConfig=[RunConfig(**c) for c in config.TABLE_DETECTION_CONFIG])


def _report_to_schema(report: PassReport) -> PassReportSchema:
    return PassReportSchema(
        index=report.index,
        flavor=report.flavor,
        pages=report.pages,
        status=report.status,
        tables_attached=report.tablesAttached,
        tables_rejected=report.tablesRejected,
        words_removed=report.wordsRemoved,
        error=report.error,
    )


class DocumentProcessor:
    """Runs the table detection stage for API requests."""

    def __init__(self, extractor: Optional[TableExtractor] = None):
        self._extractor = extractor or CamelotExtractor(
            python=config.DETECTOR_PYTHON,
            timeout=config.DETECTOR_TIMEOUT_SECONDS,
        )
        self._executor = ThreadPoolExecutor(max_workers=config.MAX_WORKERS)
        self._detector_available = False
        self._initialized = False

    async def initialize(self) -> bool:
        """Check that the detector can be used."""
        logger.info("Initializing DocumentProcessor...")
        self._detector_available = importlib.util.find_spec("camelot") is not None
        if not self._detector_available:
            logger.warning("camelot is not importable; table detection passes will fail")
        self._initialized = True
        return self._detector_available

    @property
    def is_ready(self) -> bool:
        return self._initialized

    @property
    def detector_available(self) -> bool:
        return self._detector_available

    def _detect(self, doc: Document, options: TableDetectionOptions) -> Tuple[Document, List[PassReport]]:
        engine = TableDetectionEngine(options=options, extractor=self._extractor)
        engine.detectTables(doc)
        return doc, engine.reports

    async def process_document(self, doc: Document, options: Optional[TableDetectionOptions],
                               request_id: str) -> ProcessingResult:
        """Run every configured detection pass over `doc`."""
        start_time = time.time()
        options = options or default_options()

        logger.info(f"Detecting tables in {doc.inputFile}", extra={"extra_data": {
            "request_id": request_id, "pages": len(doc.pages), "passes": len(options.runConfig)
        }})

        try:
            loop = asyncio.get_running_loop()
            doc, reports = await loop.run_in_executor(self._executor, self._detect, doc, options)
        except Exception as e:
            logger.exception(f"Table detection failed: {e}", extra={"extra_data": {"request_id": request_id}})
            return ProcessingResult(
                request_id=request_id, status=ProcessingStatus.FAILED,
                processing_time_ms=(time.time() - start_time) * 1000,
                page_count=len(doc.pages), errors=[str(e)]
            )

        processing_time = (time.time() - start_time) * 1000
        tables = doc.getElementsOfType(Table, deep=False)
        errors = [r.error for r in reports if r.error]

        logger.info(f"Table detection finished in {processing_time:.1f}ms", extra={"extra_data": {
            "request_id": request_id, "tables": len(tables)
        }})

        return ProcessingResult(
            request_id=request_id, status=ProcessingStatus.COMPLETED,
            processing_time_ms=processing_time, page_count=len(doc.pages),
            tables_detected=len(tables),
            words_removed=sum(r.wordsRemoved for r in reports),
            passes=[_report_to_schema(r) for r in reports],
            document=document_to_dict(doc), errors=errors
        )

    async def shutdown(self):
        logger.info("Shutting down DocumentProcessor")
        self._executor.shutdown(wait=True)


# Global instance
_processor: Optional[DocumentProcessor] = None


async def get_processor() -> DocumentProcessor:
    global _processor
    if _processor is None:
        _processor = DocumentProcessor()
        await _processor.initialize()
    return _processor


async def initialize_processor(extractor: Optional[TableExtractor] = None):
    global _processor
    _processor = DocumentProcessor(extractor=extractor)
    await _processor.initialize()


async def shutdown_processor():
    global _processor
    if _processor:
        await _processor.shutdown()
        _processor = None
