"""
Presence Monitor - Detection Module

People detection and duplicate box suppression.
"""

from .base import Detector, area_confidence
from .hog_detector import HogPeopleDetector
from .suppression import iou, iou_matrix, keep_indices, non_maximum_suppression, suppress_detections

__all__ = [
    'Detector',
    'area_confidence',
    'HogPeopleDetector',
    'iou',
    'iou_matrix',
    'keep_indices',
    'non_maximum_suppression',
    'suppress_detections',
]
