# Models package - Data structures for the document representation
from .base import BoundingBox, BoxOverlap, PageElement, element_ids
from .text import Word
from .table import Table, TableRow, TableCell, SpannedTableCell
from .document import Page, Document

__all__ = [
    'BoundingBox', 'BoxOverlap', 'PageElement', 'element_ids',
    'Word',
    'Table', 'TableRow', 'TableCell', 'SpannedTableCell',
    'Page', 'Document'
]
