"""
JSON reader/writer for the document representation.

Layout:
    {"inputFile": "...", "pages": [{"pageNumber": 1, "box": {...}, "elements": [...]}]}

Elements carry a "type" ("word", "table", "row", "cell", "spanned-cell"),
their "id" and "box". Tables nest rows, rows nest cells and cells nest the
words they hold, so words consumed by a table are only found inside it.
"""
import json
from typing import Dict, Optional

from app.models import (
    BoundingBox, Document, Page, PageElement, SpannedTableCell,
    Table, TableCell, TableRow, Word, element_ids
)


def _box_to_dict(box: Optional[BoundingBox]) -> Optional[Dict]:
    if box is None:
        return None
    return {"l": box.left, "t": box.top, "w": box.width, "h": box.height}


def _require_object(data, what: str):
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object for the {what}, got {type(data).__name__}")


def _box_from_dict(data: Optional[Dict]) -> Optional[BoundingBox]:
    if data is None:
        return None
    return BoundingBox(float(data["l"]), float(data["t"]), float(data["w"]), float(data["h"]))


def element_to_dict(element: PageElement) -> Dict:
    base = {"id": element.id, "box": _box_to_dict(element.bbox)}
    if isinstance(element, Word):
        return {"type": "word", **base, "content": element.content}
    if isinstance(element, SpannedTableCell):
        return {"type": "spanned-cell", **base, "direction": element.direction}
    if isinstance(element, TableCell):
        return {
            "type": "cell", **base,
            "colSpan": element.colSpan, "rowSpan": element.rowSpan,
            "content": [element_to_dict(word) for word in element.content],
        }
    if isinstance(element, TableRow):
        return {"type": "row", **base, "content": [element_to_dict(cell) for cell in element.content]}
    if isinstance(element, Table):
        return {"type": "table", **base, "content": [element_to_dict(row) for row in element.content]}
    raise ValueError(f"Cannot serialize element of type {type(element).__name__}")


def element_from_dict(data: Dict) -> PageElement:
    _require_object(data, "element")
    element_type = data.get("type")
    kwargs = {"bbox": _box_from_dict(data.get("box"))}
    if data.get("id") is not None:
        kwargs["id"] = int(data["id"])
        element_ids.reserve(kwargs["id"])

    if element_type == "word":
        return Word(content=data.get("content", ""), **kwargs)
    if element_type == "spanned-cell":
        return SpannedTableCell(direction=data.get("direction", "left"), **kwargs)
    if element_type == "cell":
        return TableCell(
            content=[element_from_dict(word) for word in data.get("content", [])],
            colSpan=int(data.get("colSpan") or 1),
            rowSpan=int(data.get("rowSpan") or 1),
            **kwargs,
        )
    if element_type == "row":
        return TableRow(content=[element_from_dict(cell) for cell in data.get("content", [])], **kwargs)
    if element_type == "table":
        return Table(content=[element_from_dict(row) for row in data.get("content", [])], **kwargs)
    raise ValueError(f"Unknown element type: {element_type!r}")


def document_to_dict(doc: Document) -> Dict:
    return {
        "inputFile": doc.inputFile,
        "pages": [
            {
                "pageNumber": page.pageNumber,
                "box": _box_to_dict(page.box),
                "elements": [element_to_dict(e) for e in page.elements],
            }
            for page in doc.pages
        ],
    }


def document_from_dict(data: Dict) -> Document:
    _require_object(data, "document")
    doc = Document(inputFile=data.get("inputFile", ""))
    for index, page_data in enumerate(data.get("pages", [])):
        _require_object(page_data, f"page {index + 1}")
        box = _box_from_dict(page_data.get("box"))
        if box is None:
            raise ValueError(f"Page {index + 1} has no box")
        page = Page(
            pageNumber=int(page_data.get("pageNumber", index + 1)),
            width=box.width,
            height=box.height,
            elements=[element_from_dict(e) for e in page_data.get("elements", [])],
        )
        doc.addPage(page)
    return doc


class JsonBuilder:
    def build(self, doc_model: Document, path: str):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document_to_dict(doc_model), f, ensure_ascii=False, indent=2)

    def load(self, path: str) -> Document:
        with open(path, "r", encoding="utf-8") as f:
            return document_from_dict(json.load(f))
