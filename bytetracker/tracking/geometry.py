"""
Bounding Box Geometry.

Axis-aligned rectangles in (top, left, width, height) form and the
Intersection-over-Union (IoU) measures used for association.

Usage:
    from bytetracker.tracking import Rect, compute_iou

    a = Rect(top=0, left=0, width=10, height=10)
    b = Rect.from_tlbr(5, 5, 15, 15)
    compute_iou(a, b)  # 25 / 175
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box in pixels."""
    top: float
    left: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        """Box center as (cx, cy)."""
        return (self.left + self.width / 2, self.top + self.height / 2)

    def to_tlwh(self) -> np.ndarray:
        """Get box in (left, top, width, height) format."""
        return np.array([self.left, self.top, self.width, self.height])

    def to_tlbr(self) -> np.ndarray:
        """Get box in (x1, y1, x2, y2) format."""
        return np.array([self.left, self.top, self.right, self.bottom])

    def to_xyah(self) -> np.ndarray:
        """Get box in (center x, center y, aspect ratio, height) format."""
        cx, cy = self.center
        return np.array([cx, cy, self.width / self.height, self.height])

    @classmethod
    def from_tlbr(cls, x1: float, y1: float, x2: float, y2: float) -> 'Rect':
        return cls(top=float(y1), left=float(x1), width=float(x2 - x1), height=float(y2 - y1))

    @classmethod
    def from_xyah(cls, xyah: Sequence[float]) -> 'Rect':
        """Inverse of `to_xyah`."""
        cx, cy, a, h = (float(v) for v in xyah[:4])
        w = a * h
        return cls(top=cy - h / 2, left=cx - w / 2, width=w, height=h)

    def iou(self, other: 'Rect') -> float:
        return compute_iou(self, other)


def compute_iou(a: Rect, b: Rect) -> float:
    """
    Compute IoU between two rectangles.

    Args:
        a, b: Rectangles

    Returns:
        IoU in [0, 1]; 0 for disjoint boxes or an empty union
    """
    inter_w = min(a.right, b.right) - max(a.left, b.left)
    inter_h = min(a.bottom, b.bottom) - max(a.top, b.top)
    if inter_w <= 0 or inter_h <= 0:
        return 0.0

    inter_area = inter_w * inter_h
    union_area = a.area + b.area - inter_area
    if union_area <= 0:
        return 0.0

    return inter_area / union_area


def compute_iou_matrix(
    rects_a: Sequence[Rect],
    rects_b: Sequence[Rect],
) -> np.ndarray:
    """
    Compute IoU matrix between two sets of rectangles.

    Args:
        rects_a: N rectangles
        rects_b: M rectangles

    Returns:
        IoU matrix [N, M]
    """
    iou_matrix = np.zeros((len(rects_a), len(rects_b)), dtype=np.float64)

    for i, a in enumerate(rects_a):
        for j, b in enumerate(rects_b):
            iou_matrix[i, j] = compute_iou(a, b)

    return iou_matrix


def iou_distance(
    rects_a: Sequence[Rect],
    rects_b: Sequence[Rect],
) -> np.ndarray:
    """Association cost matrix `1 - IoU`, shape [N, M]."""
    return 1.0 - compute_iou_matrix(rects_a, rects_b)
