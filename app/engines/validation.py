"""
False-table filter.

The detector regularly reports tables in plain body text. Those usually come
out as a single row or as rows that do not touch each other, which is what
this check rejects.
"""
from typing import Optional

from app.models import Table, TableRow
from app.utils import round_up
from config.settings import ROW_ADJACENCY_DECIMALS


def _top(row: TableRow, decimals: int) -> float:
    return round_up(row.bbox.top, decimals)


def _bottom(row: TableRow, decimals: int) -> float:
    return round_up(row.bbox.bottom, decimals)


def find_adjacent_row(table: Table, row_index: int, decimals: int = ROW_ADJACENCY_DECIMALS) -> Optional[TableRow]:
    """
    A row touching the given one: the row starting where it ends, or for the
    last row, the row ending where it starts.
    """
    rows = [row for row in table.content if row.bbox is not None]
    row = table.content[row_index]
    if row.bbox is None:
        return None

    if row_index + 1 == len(table.content):
        wanted = _top(row, decimals)
        return next((other for other in rows if _bottom(other, decimals) == wanted), None)

    wanted = _bottom(row, decimals)
    return next((other for other in rows if _top(other, decimals) == wanted), None)


def is_false_table(table: Table, decimals: int = ROW_ADJACENCY_DECIMALS) -> bool:
    """True when the table should not be attached to its page."""
    if table.rowCount <= 1:
        return True
    return any(find_adjacent_row(table, i, decimals) is None for i in range(table.rowCount))
