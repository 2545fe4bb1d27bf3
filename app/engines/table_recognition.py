"""
Table structure reconstruction from raw detector geometry.

Turns one RawTableDescriptor (PDF space, bottom-left origin) into a Table of
rows and cells in page space, assigning the page's words to the cells that
contain them.
"""
import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from app.extractors.schema import RawCell, RawTableDescriptor
from app.models import BoundingBox, Page, SpannedTableCell, Table, TableCell, TableRow, Word
from app.utils import flip_y
from config.settings import CELL_WORD_OVERLAP_THRESHOLD, SPAN_LEFT, SPAN_TOP
from .content_merge import join_cells_by_content

logger = logging.getLogger("dla.table_recognition")

GridPosition = Tuple[int, int]  # (col, row)


class TableRecognitionEngine:
    """
    Builds Table / TableRow / TableCell / SpannedTableCell structures.

    The engine only reads the page; attaching the result is up to the caller.
    """

    def __init__(self, overlap_threshold: float = CELL_WORD_OVERLAP_THRESHOLD):
        self.overlap_threshold = overlap_threshold

    def build_table(self, descriptor: RawTableDescriptor, page: Page) -> Table:
        """
        Reconstruct the table described by `descriptor` on `page`.

        Stream tables that carry their expected cell text are passed through
        the content-reconciliation merge before being returned.
        """
        table = Table(bbox=self._table_box(descriptor, page.height))
        table.content = self._create_rows(descriptor, page)

        if descriptor.expects_content:
            table.content = join_cells_by_content(table.content, descriptor.content)

        logger.debug(f"Built table {table.id} on page {page.pageNumber}: {table.rowCount} rows, {table.colCount} cols")
        return table

    def _table_box(self, descriptor: RawTableDescriptor, page_height: float) -> BoundingBox:
        return BoundingBox(
            descriptor.location.x,
            flip_y(descriptor.location.y, page_height),
            descriptor.size.width,
            descriptor.size.height,
        )

    def _create_rows(self, descriptor: RawTableDescriptor, page: Page) -> List[TableRow]:
        page_words = page.getElementsOfType(Word, deep=False)

        # positions already claimed by the span of an earlier cell
        spanned_cells: Dict[GridPosition, str] = {}

        rows = []
        for row_index, raw_row in enumerate(descriptor.cells):
            cells = self._create_row_cells(
                list(raw_row), row_index, descriptor, page.height, page_words, spanned_cells
            )
            rows.append(TableRow(bbox=self._row_box(cells), content=cells))
        return rows

    def _create_row_cells(
        self,
        raw_row: List[Optional[RawCell]],
        row_index: int,
        descriptor: RawTableDescriptor,
        page_height: float,
        page_words: List[Word],
        spanned_cells: Dict[GridPosition, str],
    ) -> List[TableCell]:
        cols = descriptor.cols
        cells: List[TableCell] = []

        for col_index in range(len(cols)):
            grid_box = self._grid_box(descriptor, col_index, row_index, page_height)

            direction = spanned_cells.get((col_index, row_index))
            if direction is not None:
                cells.append(SpannedTableCell(bbox=grid_box, direction=direction))
                # rows listing only their own cells skip the spanned slots
                if len(raw_row) < len(cols):
                    raw_row.insert(col_index, None)
                continue

            raw_cell = raw_row[col_index] if col_index < len(raw_row) else None
            if raw_cell is None:
                cells.append(TableCell(bbox=grid_box))
                continue

            for dx in range(raw_cell.colSpan):
                for dy in range(raw_cell.rowSpan):
                    if dx or dy:
                        spanned_cells.setdefault(
                            (col_index + dx, row_index + dy), SPAN_LEFT if dx > 0 else SPAN_TOP
                        )

            cell_box = BoundingBox(
                raw_cell.location.x,
                flip_y(raw_cell.location.y, page_height),
                raw_cell.size.width,
                raw_cell.size.height,
            )
            cells.append(TableCell(
                bbox=cell_box,
                content=self._words_in_cell_box(cell_box, page_words),
                colSpan=raw_cell.colSpan,
                rowSpan=raw_cell.rowSpan,
            ))

        return cells

    def _grid_box(self, descriptor: RawTableDescriptor, col_index: int, row_index: int,
                  page_height: float) -> BoundingBox:
        """Box of one grid position, from the column and row boundaries."""
        x1, x2 = descriptor.cols[col_index]
        y1, y2 = (flip_y(y, page_height) for y in descriptor.rows[row_index])
        return BoundingBox(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))

    def _words_in_cell_box(self, cell_box: BoundingBox, page_words: List[Word]) -> List[Word]:
        return [
            word for word in page_words
            if word.bbox is not None
            and word.bbox.getOverlap(cell_box).box1OverlapProportion > self.overlap_threshold
        ]

    def _row_box(self, cells: List[TableCell]) -> Optional[BoundingBox]:
        """
        Bounds of a row: min left/top, max right and min bottom of its cells.

        Using the smallest bottom keeps row-spanning cells from stretching the
        row over the rows below it. Cells without geometry are left out.
        """
        edges = np.array([
            [c.bbox.left, c.bbox.top, c.bbox.right, c.bbox.bottom]
            for c in cells if c.bbox is not None
        ])
        if edges.size == 0:
            return None

        min_left = float(edges[:, 0].min())
        min_top = float(edges[:, 1].min())
        max_right = float(edges[:, 2].max())
        min_bottom = float(edges[:, 3].min())
        return BoundingBox(min_left, min_top, max_right - min_left, min_bottom - min_top)
