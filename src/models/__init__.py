"""
Typed models for the presence monitor application.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .subject import TrackedSubject, TrackingResult
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    SuppressionConfig,
    TrackingConfig,
    PublishConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Tracking
    "TrackedSubject",
    "TrackingResult",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "SuppressionConfig",
    "TrackingConfig",
    "PublishConfig",
    "WebConfig",
]
