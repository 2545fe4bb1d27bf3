"""
Table detection stage.

Runs the configured detector passes over a document, reconstructs the tables
each pass reports, attaches the ones that pass the false-table filter and
removes the words they consumed from the pages' loose element lists.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from app.extractors import (
    CamelotExtractor, MalformedPayloadError, RawPageTables, RunConfig,
    TableDetectionOptions, TableExtractor, parse_payload
)
from app.extractors.base import pages_argument
from app.models import Document, Page, Table, TableCell, Word
from config.settings import PDF_MAGIC
from .table_recognition import TableRecognitionEngine
from .validation import is_false_table

logger = logging.getLogger("dla.table_detection")

PASS_COMPLETED = "completed"
PASS_EXTRACTOR_FAILED = "extractor_failed"
PASS_MALFORMED = "malformed"


@dataclass
class PassReport:
    """What one detector pass did to the document."""
    index: int
    flavor: str
    pages: List[int] = field(default_factory=list)
    status: str = PASS_COMPLETED
    tablesAttached: int = 0
    tablesRejected: int = 0
    wordsRemoved: int = 0
    error: Optional[str] = None


def remove_words_used_in_cells(doc: Document) -> int:
    """
    Drop from every page the loose words that a table cell on that page holds.

    Such words stay reachable through their cell. Elements other than words
    are never removed. Returns the number of words removed.
    """
    removed = 0
    for page in doc.pages:
        cell_word_ids = {
            word.id
            for cell in page.getElementsOfType(TableCell)
            for word in cell.content
        }
        if not cell_word_ids:
            continue

        kept = [
            element for element in page.elements
            if not (isinstance(element, Word) and element.id in cell_word_ids)
        ]
        removed += len(page.elements) - len(kept)
        page.elements = kept
    return removed


def _is_pdf(path: str) -> bool:
    with open(path, "rb") as f:
        return f.read(len(PDF_MAGIC)) == PDF_MAGIC


class TableDetectionEngine:
    """
    Adds the tables found by an external detector to a document.

    The "document already has tables" guard is checked once per call to
    `detectTables`, before the first pass. Passes of one call are not
    re-checked against each other, so each of them can add tables.
    """

    def __init__(self, options: Optional[TableDetectionOptions] = None,
                 extractor: Optional[TableExtractor] = None,
                 recognition_engine: Optional[TableRecognitionEngine] = None):
        self.options = options or TableDetectionOptions()
        self.extractor = extractor or CamelotExtractor()
        self.recognition_engine = recognition_engine or TableRecognitionEngine()
        self.reports: List[PassReport] = []

    def setExtractor(self, extractor: TableExtractor):
        self.extractor = extractor

    def detectTables(self, doc: Document) -> Document:
        """Run every configured pass over `doc`, mutating its pages. Always returns `doc`."""
        self.reports = []
        if not self._should_process(doc):
            return doc

        passes = self.options.runConfig
        for index, config in enumerate(passes):
            logger.info(
                f"Table detection pass {index + 1}/{len(passes)}: "
                f"flavor={config.flavor}, pages={pages_argument(config.pages)}"
            )
            report = self._run_pass(index, config, doc)
            self.reports.append(report)
            logger.info(
                f"Pass {index + 1} {report.status}: {report.tablesAttached} tables attached, "
                f"{report.tablesRejected} rejected, {report.wordsRemoved} words removed"
            )
        return doc

    def _should_process(self, doc: Document) -> bool:
        try:
            if not os.path.exists(doc.inputFile):
                logger.warning(f"Input file {doc.inputFile} cannot be found. Not performing table detection.")
                return False
            if not _is_pdf(doc.inputFile):
                logger.warning(f"Input file {doc.inputFile} is not a PDF. Not performing table detection.")
                return False
        except (OSError, ValueError) as e:
            logger.error(f"Could not check the input file {doc.inputFile}: {e}")
            return False

        if doc.getElementsOfType(Table, deep=False):
            logger.warning("Document already has tables. Not performing table detection.")
            return False
        return True

    def _run_pass(self, index: int, config: RunConfig, doc: Document) -> PassReport:
        report = PassReport(index=index, flavor=config.flavor, pages=list(config.pages))

        try:
            result = self.extractor.read_tables(doc.inputFile, config)
        except Exception as e:
            logger.exception(f"Table extractor raised: {e}")
            report.status = PASS_EXTRACTOR_FAILED
            report.error = str(e)
            return report

        if not result.ok:
            logger.error(f"Table detector failed with status {result.status}: {result.stderr}")
            report.status = PASS_EXTRACTOR_FAILED
            report.error = result.stderr
            return report

        try:
            page_tables = parse_payload(result.stdout)
            candidates = self._build_tables(page_tables, doc)
        except MalformedPayloadError as e:
            logger.error(f"Skipping pass {index + 1}: {e}")
            report.status = PASS_MALFORMED
            report.error = str(e)
            return report

        for page, table in candidates:
            if is_false_table(table):
                logger.debug(f"Rejected false table on page {page.pageNumber} ({table.rowCount} rows)")
                report.tablesRejected += 1
                continue
            page.elements.append(table)
            report.tablesAttached += 1

        report.wordsRemoved = remove_words_used_in_cells(doc)
        return report

    def _build_tables(self, page_tables: List[RawPageTables], doc: Document) -> List[Tuple[Page, Table]]:
        """Reconstruct every table of the payload before any page is touched."""
        candidates = []
        for entry in page_tables:
            if entry.page > len(doc.pages):
                raise MalformedPayloadError(
                    f"Detector reported page {entry.page} but the document has {len(doc.pages)} pages"
                )
            page = doc.pages[entry.page - 1]
            for descriptor in entry.tables:
                candidates.append((page, self.recognition_engine.build_table(descriptor, page)))
        return candidates
