"""
Pairwise overlap suppression for raw detector boxes.

A box is dropped when ANY other box in the same frame overlaps it with an IoU
above the threshold. The rule is symmetric and does not rank by confidence:
two boxes that overlap each other beyond the threshold are both dropped, even
if neither overlaps anything else. This is not greedy NMS.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from models.detection import BoundingBox, Detection


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """Intersection over Union of two boxes (0.0 for an empty union)."""
    return a.iou(b)


def iou_matrix(boxes: Sequence[BoundingBox]) -> np.ndarray:
    """
    Pairwise IoU for all boxes.

    Returns:
        (N, N) float array; entry [i, j] is IoU(boxes[i], boxes[j]).
    """
    if len(boxes) == 0:
        return np.zeros((0, 0), dtype=float)

    arr = np.array([b.as_tuple() for b in boxes], dtype=float)
    x1, y1 = arr[:, 0], arr[:, 1]
    x2, y2 = x1 + arr[:, 2], y1 + arr[:, 3]
    area = arr[:, 2] * arr[:, 3]

    inter_w = np.clip(np.minimum(x2[:, None], x2[None, :]) - np.maximum(x1[:, None], x1[None, :]), 0, None)
    inter_h = np.clip(np.minimum(y2[:, None], y2[None, :]) - np.maximum(y1[:, None], y1[None, :]), 0, None)
    intersection = inter_w * inter_h
    union = area[:, None] + area[None, :] - intersection

    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(union > 0, intersection / union, 0.0)


def keep_indices(boxes: Sequence[BoundingBox], threshold: float) -> List[int]:
    """
    Indices of boxes that survive suppression, in input order.

    Args:
        boxes: Candidate boxes for one frame.
        threshold: IoU threshold in (0, 1); a box is dropped if some other box
            has IoU strictly greater than this.
    """
    if not 0 < threshold < 1:
        raise ValueError(f"IoU threshold must be in (0, 1), got {threshold}")
    if len(boxes) == 0:
        return []

    ious = iou_matrix(boxes)
    np.fill_diagonal(ious, 0.0)
    dominated = (ious > threshold).any(axis=1)
    return [i for i in range(len(boxes)) if not dominated[i]]


def non_maximum_suppression(boxes: Sequence[BoundingBox], threshold: float) -> List[BoundingBox]:
    """Return the boxes not overlapped beyond `threshold` by any peer."""
    return [boxes[i] for i in keep_indices(boxes, threshold)]


def suppress_detections(detections: Sequence[Detection], threshold: float) -> List[Detection]:
    """Apply non_maximum_suppression() to detections, keeping their confidences."""
    kept = keep_indices([d.bbox for d in detections], threshold)
    return [detections[i] for i in kept]
