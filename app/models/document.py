"""
Document and Page models for the document representation.
"""
from dataclasses import dataclass, field
from typing import Iterator, List, Type, TypeVar

from .base import BoundingBox, PageElement
from .table import Table, TableRow, TableCell

T = TypeVar("T", bound=PageElement)


def _walk(element: PageElement) -> Iterator[PageElement]:
    """Yield an element and everything nested inside it."""
    yield element
    if isinstance(element, Table):
        for row in element.content:
            yield from _walk(row)
    elif isinstance(element, TableRow):
        for cell in element.content:
            yield from _walk(cell)
    elif isinstance(element, TableCell):
        yield from element.content


@dataclass
class Page:
    """Represents a single page in a document.

    `elements` is a flat list in processing order; tables keep their rows,
    cells and cell words nested inside them.
    """
    pageNumber: int
    width: float
    height: float
    elements: List[PageElement] = field(default_factory=list)

    @property
    def box(self) -> BoundingBox:
        return BoundingBox(0.0, 0.0, self.width, self.height)

    def getElementsOfType(self, element_type: Type[T], deep: bool = True) -> List[T]:
        """
        Elements of the given type on this page.

        With `deep` the search also descends into tables, which is how the
        cells of a page (and the words they hold) are found.
        """
        if not deep:
            return [e for e in self.elements if isinstance(e, element_type)]
        found = []
        for element in self.elements:
            for item in _walk(element):
                if isinstance(item, element_type):
                    found.append(item)
        return found


@dataclass
class Document:
    """Represents a complete document with multiple pages."""
    inputFile: str = ""
    pages: List[Page] = field(default_factory=list)

    def addPage(self, page: Page):
        """Add a page to the document."""
        self.pages.append(page)

    def getElementsOfType(self, element_type: Type[T], deep: bool = True) -> List[T]:
        found = []
        for page in self.pages:
            found.extend(page.getElementsOfType(element_type, deep=deep))
        return found
