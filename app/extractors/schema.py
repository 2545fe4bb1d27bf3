"""
Wire format of the table detector output.

The detector prints a JSON list with one entry per requested page:

    [{"page": 1, "tables": [RawTableDescriptor, ...]}, ...]

Coordinates are in PDF space (bottom-left origin). The payload is parsed
once, here; anything missing the geometry the reconstruction needs is
rejected as a whole rather than repaired.
"""
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator


class MalformedPayloadError(ValueError):
    """The detector output could not be parsed into table descriptors."""


class RawPoint(BaseModel):
    x: float
    y: float


class RawSize(BaseModel):
    width: float
    height: float


class RawCell(BaseModel):
    """One detected cell; `location` is its top-left corner in PDF space."""
    location: RawPoint
    size: RawSize
    colSpan: int = Field(default=1, ge=1)
    rowSpan: int = Field(default=1, ge=1)

    @field_validator("colSpan", "rowSpan", mode="before")
    @classmethod
    def default_span(cls, value):
        return 1 if value is None else value


class RawTableDescriptor(BaseModel):
    """Geometry (and for stream tables, expected text) of one detected table."""
    location: RawPoint
    size: RawSize
    cols: List[Tuple[float, float]]
    rows: List[Tuple[float, float]]
    cells: List[List[Optional[RawCell]]]
    content: Optional[List[List[str]]] = None
    flavor: Literal["lattice", "stream"] = "lattice"

    @field_validator("content", mode="before")
    @classmethod
    def stringify_content(cls, value):
        if value is None:
            return None
        return [["" if text is None else str(text) for text in row] for row in value]

    @model_validator(mode="after")
    def validate_grid(self) -> "RawTableDescriptor":
        """The cell grid must fit inside the row and column boundaries."""
        if len(self.cells) > len(self.rows):
            raise ValueError(f"{len(self.cells)} cell rows for {len(self.rows)} row boundaries")
        for i, row in enumerate(self.cells):
            if len(row) > len(self.cols):
                raise ValueError(f"Cell row {i} has {len(row)} cells for {len(self.cols)} column boundaries")
            # rows listing only their own cells do not give the column of each cell
            full_row = len(row) == len(self.cols)
            for j, cell in enumerate(row):
                if cell is None:
                    continue
                if i + cell.rowSpan > len(self.rows):
                    raise ValueError(f"Cell ({j}, {i}) spans {cell.rowSpan} rows past the {len(self.rows)} of the table")
                if cell.colSpan > len(self.cols) or (full_row and j + cell.colSpan > len(self.cols)):
                    raise ValueError(f"Cell ({j}, {i}) spans {cell.colSpan} columns past the {len(self.cols)} of the table")
        return self

    @property
    def expects_content(self) -> bool:
        return self.content is not None and self.flavor == "stream"


class RawPageTables(BaseModel):
    page: int = Field(ge=1)
    tables: List[RawTableDescriptor] = Field(default_factory=list)


_payload_adapter = TypeAdapter(List[RawPageTables])


def parse_payload(stdout: str) -> List[RawPageTables]:
    """Parse the detector's stdout, raising MalformedPayloadError on any problem."""
    try:
        return _payload_adapter.validate_json(stdout)
    except ValidationError as e:
        raise MalformedPayloadError(f"Invalid table detector payload: {e}") from e
