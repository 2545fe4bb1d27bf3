"""Shared test configuration and fixtures."""

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from app.extractors import RawTableDescriptor, TableExtractor, TableExtractorResult
from app.models import BoundingBox, Document, Page, Word

PAGE_WIDTH = 600.0
PAGE_HEIGHT = 800.0


class FakeExtractor(TableExtractor):
    """Returns canned detector results, one per call, and records the calls."""

    def __init__(self, results: Sequence[TableExtractorResult]):
        self.results = list(results)
        self.calls = []

    def read_tables(self, input_file, config):
        self.calls.append((input_file, config))
        return self.results.pop(0)


def build_grid(
    left: float,
    top: float,
    col_widths: Sequence[float],
    row_heights: Sequence[float],
    spans: Optional[Dict[Tuple[int, int], Tuple[int, int]]] = None,
    content: Optional[List[List[str]]] = None,
    flavor: str = "lattice",
    page_height: float = PAGE_HEIGHT,
    drop_covered: bool = False,
) -> Dict:
    """
    Detector descriptor (PDF space) for a regular grid given in page space.

    `spans` maps (col, row) to (colSpan, rowSpan). Covered positions are
    emitted as None, or left out of their row with `drop_covered`.
    """
    spans = spans or {}
    xs = [left]
    for w in col_widths:
        xs.append(xs[-1] + w)
    ys = [top]
    for h in row_heights:
        ys.append(ys[-1] + h)

    covered = set()
    for (c, r), (cs, rs) in spans.items():
        for dx in range(cs):
            for dy in range(rs):
                if dx or dy:
                    covered.add((c + dx, r + dy))

    cells = []
    for r in range(len(row_heights)):
        row = []
        for c in range(len(col_widths)):
            if (c, r) in covered:
                if not drop_covered:
                    row.append(None)
                continue
            cs, rs = spans.get((c, r), (1, 1))
            row.append({
                "location": {"x": xs[c], "y": page_height - ys[r]},
                "size": {"width": xs[c + cs] - xs[c], "height": ys[r + rs] - ys[r]},
                "colSpan": cs,
                "rowSpan": rs,
            })
        cells.append(row)

    descriptor = {
        "location": {"x": xs[0], "y": page_height - ys[0]},
        "size": {"width": xs[-1] - xs[0], "height": ys[-1] - ys[0]},
        "cols": [[xs[i], xs[i + 1]] for i in range(len(col_widths))],
        "rows": [[page_height - ys[i], page_height - ys[i + 1]] for i in range(len(row_heights))],
        "cells": cells,
        "flavor": flavor,
    }
    if content is not None:
        descriptor["content"] = content
    return descriptor


@pytest.fixture
def grid():
    """Factory for wire-format table descriptors."""
    return build_grid


@pytest.fixture
def descriptor():
    """Factory for parsed RawTableDescriptor values."""
    def _make(**kwargs) -> RawTableDescriptor:
        return RawTableDescriptor.model_validate(build_grid(**kwargs))
    return _make


@pytest.fixture
def make_word():
    def _make(text: str, x: float, y: float, width: float = 20.0, height: float = 10.0) -> Word:
        return Word(bbox=BoundingBox(x, y, width, height), content=text)
    return _make


@pytest.fixture
def make_page():
    def _make(elements=None, number: int = 1) -> Page:
        return Page(pageNumber=number, width=PAGE_WIDTH, height=PAGE_HEIGHT, elements=list(elements or []))
    return _make


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "input.pdf"
    path.write_bytes(b"%PDF-1.4\n%fake test document\n")
    return str(path)


@pytest.fixture
def make_document(pdf_file, make_page):
    def _make(*pages_elements, input_file: Optional[str] = None) -> Document:
        doc = Document(inputFile=input_file or pdf_file)
        for number, elements in enumerate(pages_elements, start=1):
            doc.addPage(make_page(elements, number=number))
        return doc
    return _make
