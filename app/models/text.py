"""
Word model for the document representation.
"""
from dataclasses import dataclass

from .base import PageElement


@dataclass
class Word(PageElement):
    """A single extracted word with its position on the page."""
    content: str = ""

    def __str__(self) -> str:
        return self.content
