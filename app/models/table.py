"""
Table-related models for the document representation.
"""
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence

from config.settings import SPAN_DIRECTIONS, SPAN_LEFT
from .base import PageElement, BoundingBox
from .text import Word


@dataclass
class TableCell(PageElement):
    """A cell of a table row.

    `content` holds the page's own Word objects, not copies, so a word stays
    a single object whether it is reached through the page or through a cell.
    """
    content: List[Word] = field(default_factory=list)
    colSpan: int = 1
    rowSpan: int = 1

    def __str__(self) -> str:
        return " ".join(word.content for word in self.content)


@dataclass
class SpannedTableCell(TableCell):
    """Grid position covered by the span of another cell.

    `direction` points toward the owning cell: "left" for a cell spanned
    horizontally from its left, "top" for one spanned vertically from above.
    """
    direction: str = "left"

    def __post_init__(self):
        if self.direction not in SPAN_DIRECTIONS:
            raise ValueError(f"Unknown span direction: {self.direction}")


def grid_width(cells: Sequence[TableCell]) -> int:
    """
    Number of grid columns covered by consecutive cells of one row.

    A cell counts its colSpan. A "left" spanned cell right after the cell
    whose span covers it is already counted by that cell; any other spanned
    cell counts one column.
    """
    width = 0
    pending = 0
    for cell in cells:
        if isinstance(cell, SpannedTableCell):
            if cell.direction == SPAN_LEFT and pending > 0:
                pending -= 1
            else:
                width += 1
                pending = 0
            continue
        width += cell.colSpan
        pending = cell.colSpan - 1
    return width


@dataclass
class TableRow(PageElement):
    """An ordered sequence of cells."""
    content: List[TableCell] = field(default_factory=list)

    def mergeCells(self, groups: Sequence[Sequence[int]]):
        """
        Coalesce groups of cell positions into single cells.

        Each group (column indices of this row) becomes one cell whose box is
        the union of the group's boxes and whose words are concatenated left to
        right. Cells outside every group are kept as they are.
        """
        first_of_group = {}
        absorbed = set()
        for group in groups:
            indices = sorted(group)
            if len(indices) < 2:
                continue
            first_of_group[indices[0]] = indices
            absorbed.update(indices[1:])

        merged: List[TableCell] = []
        for index, cell in enumerate(self.content):
            if index in absorbed:
                continue
            if index not in first_of_group:
                merged.append(cell)
                continue

            cells = [self.content[i] for i in first_of_group[index]]
            words = [word for c in cells for word in c.content]
            merged.append(TableCell(
                bbox=BoundingBox.merge(c.bbox for c in cells),
                content=words,
                colSpan=grid_width(cells),
                rowSpan=max(c.rowSpan for c in cells),
            ))

        self.content = merged


@dataclass
class Table(PageElement):
    """A table made of rows of cells."""
    content: List[TableRow] = field(default_factory=list)

    @property
    def rowCount(self) -> int:
        return len(self.content)

    @property
    def colCount(self) -> int:
        if not self.content:
            return 0
        return max(grid_width(row.content) for row in self.content)

    def cells(self) -> Iterator[TableCell]:
        for row in self.content:
            yield from row.content
