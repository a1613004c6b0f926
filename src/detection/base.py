"""
Detection interfaces.

Detectors return raw candidate boxes in pixel space. They assign no identity
and do no deduplication; that is left to suppression and tracking.
"""

from __future__ import annotations

from typing import List

import numpy as np

from models.detection import BoundingBox, Detection

# The area heuristic reports (area / 1000) percent, clamped to 100%.
AREA_PER_PERCENT = 1000.0


def area_confidence(bbox: BoundingBox) -> float:
    """Confidence (0-1) derived from box area."""
    percent = min(bbox.area / AREA_PER_PERCENT, 100.0)
    return percent / 100.0


class Detector:
    """Detector interface returning detections in pixel-space."""

    def detect(self, frame: np.ndarray) -> List[Detection]:
        raise NotImplementedError
