"""
Base model classes for the document representation.
"""
import threading
from dataclasses import dataclass, field
from typing import Iterable, Optional


class _IdGenerator:
    """Hands out element ids that stay unique for the lifetime of the process.

    Shared by the request threads of the service, so both operations hold a lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> int:
        with self._lock:
            self._last += 1
            return self._last

    def reserve(self, value: int):
        """Make sure ids handed out later are greater than `value`."""
        with self._lock:
            if value > self._last:
                self._last = value


element_ids = _IdGenerator()


@dataclass
class BoundingBox:
    """Axis-aligned rectangle in page space (top-left origin, y grows downward)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def getOverlap(self, other: 'BoundingBox') -> 'BoxOverlap':
        """Intersection of this box with another.

        The proportions are relative to each operand's own area, so
        ``a.getOverlap(b).box1OverlapProportion`` is the share of ``a`` covered
        by ``b`` and generally differs from the same value computed from ``b``.
        """
        x1 = max(self.left, other.left)
        y1 = max(self.top, other.top)
        x2 = min(self.right, other.right)
        y2 = min(self.bottom, other.bottom)

        if x2 <= x1 or y2 <= y1:
            return BoxOverlap(box=None, area=0.0, box1OverlapProportion=0.0, box2OverlapProportion=0.0)

        intersection = BoundingBox(x1, y1, x2 - x1, y2 - y1)
        area = intersection.area
        return BoxOverlap(
            box=intersection,
            area=area,
            box1OverlapProportion=area / self.area if self.area > 0 else 0.0,
            box2OverlapProportion=area / other.area if other.area > 0 else 0.0,
        )

    @staticmethod
    def merge(boxes: Iterable['BoundingBox']) -> Optional['BoundingBox']:
        """Smallest box containing all the given boxes (None for no boxes)."""
        boxes = [b for b in boxes if b is not None]
        if not boxes:
            return None
        left = min(b.left for b in boxes)
        top = min(b.top for b in boxes)
        right = max(b.right for b in boxes)
        bottom = max(b.bottom for b in boxes)
        return BoundingBox(left, top, right - left, bottom - top)


@dataclass
class BoxOverlap:
    """Result of intersecting two bounding boxes."""
    box: Optional[BoundingBox]
    area: float
    box1OverlapProportion: float
    box2OverlapProportion: float


@dataclass
class PageElement:
    """Base class for all page elements."""
    bbox: Optional[BoundingBox] = None
    id: int = field(default_factory=element_ids.next)
