"""
HOG people detector.

Uses OpenCV's HOGDescriptor with the bundled default people SVM. Frames are
blurred before detection to reduce noise-driven false positives.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import cv2
import numpy as np

from models.config import DetectionConfig
from models.detection import BoundingBox, Detection
from .base import Detector, area_confidence


class HogPeopleDetector(Detector):
    """
    People detector backed by cv2.HOGDescriptor.

    Example:
        detector = HogPeopleDetector(DetectionConfig())
        detections = detector.detect(frame)
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        confidence_fn: Callable[[BoundingBox], float] = area_confidence,
    ):
        self.config = config or DetectionConfig()
        self._confidence_fn = confidence_fn
        self._hog = cv2.HOGDescriptor()
        self._hog.setSVMDetector(cv2.HOGDescriptor_getDefaultPeopleDetector())
        logging.info(
            f"HOG people detector initialized: hit_threshold={self.config.hit_threshold}, "
            f"stride={self.config.win_stride}, scale={self.config.scale}"
        )

    def preprocess(self, frame: np.ndarray) -> np.ndarray:
        """Gaussian blur ahead of detection."""
        k = self.config.blur_kernel
        if k and k > 1:
            return cv2.GaussianBlur(frame, (k, k), 0)
        return frame

    def detect(self, frame: np.ndarray) -> List[Detection]:
        processed = self.preprocess(frame)
        cfg = self.config
        rects, _weights = self._hog.detectMultiScale(
            processed,
            cfg.hit_threshold,
            tuple(cfg.win_stride),
            tuple(cfg.padding),
            cfg.scale,
            cfg.final_threshold,
            cfg.use_meanshift_grouping,
        )
        if rects is None or len(rects) == 0:
            return []

        out: List[Detection] = []
        for x, y, w, h in np.asarray(rects).reshape(-1, 4):
            bbox = BoundingBox(x=float(x), y=float(y), width=float(w), height=float(h))
            out.append(Detection(bbox=bbox, confidence=self._confidence_fn(bbox)))
        return out
