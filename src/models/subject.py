"""
Tracked subject models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .detection import BoundingBox


@dataclass(frozen=True)
class TrackedSubject:
    """
    A subject holding a stable identity across frames.

    Attributes:
        identity: Identity label (>= 1), assigned by the tracker.
        confidence: Detection confidence (0-1) for the current frame.
        bbox: Current bounding box.
    """
    identity: int
    confidence: float
    bbox: BoundingBox

    @property
    def confidence_pct(self) -> float:
        return self.confidence * 100.0

    def same_entity(self, other: "TrackedSubject") -> bool:
        """Same identity and the boxes still overlap."""
        return self.identity == other.identity and self.bbox.overlaps(other.bbox)

    def matches(self, other: "TrackedSubject") -> bool:
        """same_entity() with an equal confidence; used to gate publishing."""
        return self.same_entity(other) and self.confidence == other.confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "confidence": self.confidence,
            "bbox": list(self.bbox.as_tuple()),
        }


@dataclass(frozen=True)
class TrackingResult:
    """
    Outcome of one tracker update.

    Attributes:
        changed: Whether the subject set differs from the previous frame.
        subjects: Snapshot of the registry, in registry order.
        frame_index: Frame the result belongs to (0 if unknown).
    """
    changed: bool
    subjects: Tuple[TrackedSubject, ...] = ()
    frame_index: int = 0

    @property
    def identities(self) -> Tuple[int, ...]:
        return tuple(s.identity for s in self.subjects)

    @property
    def is_empty(self) -> bool:
        return not self.subjects
