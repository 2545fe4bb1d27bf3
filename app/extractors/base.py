"""
Contract between the table detection stage and an external table detector.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from pydantic import BaseModel, Field

from config.settings import DEFAULT_FLAVOR, DEFAULT_RUN_CONFIG, SUPPORTED_FLAVORS

logger = logging.getLogger("dla.extractors")


class RunConfig(BaseModel):
    """Options of one detection pass."""
    pages: List[int] = Field(default_factory=list)  # 1-based, empty means all pages
    flavor: str = DEFAULT_FLAVOR
    table_areas: List[str] = Field(default_factory=list)  # "x1,y1,x2,y2" in PDF space


class TableDetectionOptions(BaseModel):
    """Passes run, in order, by one invocation of the stage."""
    runConfig: List[RunConfig] = Field(
        default_factory=lambda: [RunConfig(**config) for config in DEFAULT_RUN_CONFIG]
    )


@dataclass
class TableExtractorResult:
    """Outcome of one detector call; `status` 0 means stdout holds the payload."""
    stdout: str
    stderr: str = ""
    status: int = 0

    @property
    def ok(self) -> bool:
        return self.status == 0


def resolve_flavor(flavor: str) -> str:
    """Return a flavor the detector supports, falling back to the default one."""
    if flavor in SUPPORTED_FLAVORS:
        return flavor
    logger.warning(
        f"Table detection flavor asked for: {flavor} is not a possibility. Defaulting to '{DEFAULT_FLAVOR}'"
    )
    return DEFAULT_FLAVOR


def pages_argument(pages: List[int]) -> str:
    """Page selection in the form the detector expects ("all" or "1,3,4")."""
    if not pages:
        return "all"
    return ",".join(str(page) for page in pages)


class TableExtractor(ABC):
    """Something that can find raw table geometry in an input file."""

    @abstractmethod
    def read_tables(self, input_file: str, config: RunConfig) -> TableExtractorResult:
        """Run the detector on `input_file`. Failures are reported in the result, not raised."""
