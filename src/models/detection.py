"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    An axis-aligned box in pixel coordinates.

    Attributes:
        x: Left edge x coordinate.
        y: Top edge y coordinate.
        width: Box width (>= 0).
        height: Box height (>= 0).
    """
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"BoundingBox extents must be non-negative, got {self.width}x{self.height}"
            )

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def intersection_area(self, other: "BoundingBox") -> float:
        """Area shared by both boxes (0 when they do not overlap)."""
        w = min(self.x2, other.x2) - max(self.x, other.x)
        h = min(self.y2, other.y2) - max(self.y, other.y)
        if w <= 0 or h <= 0:
            return 0.0
        return w * h

    def overlaps(self, other: "BoundingBox") -> bool:
        """True when the boxes share a positive area."""
        return self.intersection_area(other) > 0

    def iou(self, other: "BoundingBox") -> float:
        """
        Intersection over Union with another box.

        Returns 0.0 when the union is empty (two zero-area boxes).
        """
        intersection = self.intersection_area(other)
        union = self.area + other.area - intersection
        if union <= 0:
            return 0.0
        return intersection / union

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (x, y, width, height) tuple."""
        return (int(self.x), int(self.y), int(self.width), int(self.height))


@dataclass(frozen=True)
class Detection:
    """
    A single detection from an object detector.

    Attributes:
        bbox: Bounding box in pixel coordinates.
        confidence: Detection confidence score (0-1).
    """
    bbox: BoundingBox
    confidence: float = 1.0

    @property
    def width(self) -> float:
        return self.bbox.width

    @property
    def height(self) -> float:
        return self.bbox.height

    @classmethod
    def from_xywh(cls, x: float, y: float, w: float, h: float, confidence: float = 1.0) -> "Detection":
        """Create Detection from x, y, width, height."""
        return cls(bbox=BoundingBox(x=x, y=y, width=w, height=h), confidence=confidence)
