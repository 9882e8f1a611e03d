"""
Detections consumed by the tracker.

A detection is a rectangle, a confidence score and an optional opaque
payload owned by the caller (a detector result object, an index into a
caller-side table, ...). The payload is never inspected; it is handed to the
track that the detection updates.
"""

from dataclasses import dataclass
from typing import Generic, Iterable, List, Optional, TypeVar

from .geometry import Rect

T = TypeVar('T')


@dataclass(frozen=True)
class Detection(Generic[T]):
    """Single detector output for one frame."""
    rect: Rect
    score: float
    payload: Optional[T] = None

    @classmethod
    def from_tlbr(
        cls,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        score: float,
        payload: Optional[T] = None,
    ) -> 'Detection[T]':
        """Build a detection from a corner box [x1, y1, x2, y2]."""
        return cls(Rect.from_tlbr(x1, y1, x2, y2), float(score), payload)

    @property
    def is_valid(self) -> bool:
        """Box has positive width and height."""
        return self.rect.width > 0 and self.rect.height > 0


def filter_valid_detections(detections: Iterable[Detection]) -> List[Detection]:
    """Drop detections with degenerate boxes before they reach the tracker."""
    return [d for d in detections if d.is_valid]
