"""
Smoke tests for typed models.
"""

import numpy as np
import pytest

from models.config import (
    Config,
    DetectionConfig,
    PublishConfig,
    TrackingConfig,
)
from models.detection import BoundingBox, Detection
from models.frame import FrameData
from models.subject import TrackedSubject, TrackingResult


class TestBoundingBox:
    def test_properties(self):
        bbox = BoundingBox(x=100, y=100, width=100, height=50)
        assert bbox.x2 == 200
        assert bbox.y2 == 150
        assert bbox.area == 5000

    def test_negative_extent_rejected(self):
        with pytest.raises(ValueError):
            BoundingBox(x=0, y=0, width=-1, height=10)

    def test_as_tuple(self):
        bbox = BoundingBox(x=10.5, y=20.5, width=30.5, height=40.5)
        assert bbox.as_tuple() == (10.5, 20.5, 30.5, 40.5)
        assert bbox.as_int_tuple() == (10, 20, 30, 40)

    def test_overlap_requires_positive_area(self):
        a = BoundingBox(0, 0, 10, 10)
        assert a.overlaps(BoundingBox(9, 9, 10, 10))
        assert not a.overlaps(BoundingBox(10, 0, 10, 10))
        assert a.intersection_area(BoundingBox(5, 5, 10, 10)) == 25


class TestDetection:
    def test_from_xywh(self):
        d = Detection.from_xywh(1, 2, 3, 4, confidence=0.5)
        assert d.bbox == BoundingBox(1, 2, 3, 4)
        assert d.width == 3
        assert d.height == 4
        assert d.confidence == 0.5


class TestTrackedSubject:
    def test_confidence_pct(self):
        s = TrackedSubject(identity=1, confidence=0.2, bbox=BoundingBox(0, 0, 100, 200))
        assert s.confidence_pct == pytest.approx(20.0)

    def test_to_dict(self):
        s = TrackedSubject(identity=4, confidence=0.5, bbox=BoundingBox(1, 2, 3, 4))
        assert s.to_dict() == {"identity": 4, "confidence": 0.5, "bbox": [1, 2, 3, 4]}

    def test_different_identity_is_not_same_entity(self):
        a = TrackedSubject(identity=1, confidence=0.2, bbox=BoundingBox(0, 0, 100, 200))
        b = TrackedSubject(identity=2, confidence=0.2, bbox=BoundingBox(0, 0, 100, 200))
        assert not a.same_entity(b)

    def test_tracking_result(self):
        subjects = (
            TrackedSubject(identity=2, confidence=0.2, bbox=BoundingBox(0, 0, 100, 200)),
            TrackedSubject(identity=5, confidence=0.2, bbox=BoundingBox(300, 0, 100, 200)),
        )
        result = TrackingResult(changed=True, subjects=subjects, frame_index=9)
        assert result.identities == (2, 5)
        assert not result.is_empty
        assert TrackingResult(changed=False).is_empty


class TestFrameData:
    def test_from_numpy(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        fd = FrameData.from_numpy(frame, frame_index=3, source="cam", timestamp=12.0)
        assert fd.size == (640, 480)
        assert fd.frame_index == 3
        assert fd.source == "cam"
        assert fd.timestamp == 12.0


class TestConfigModels:
    def test_defaults_from_empty_dict(self):
        config = Config.from_dict({})
        assert config.camera.device_id == 0
        assert config.camera.resolution == [640, 480]
        assert config.suppression.iou_threshold == 0.5
        assert config.tracking.min_width == 60
        assert config.tracking.min_height == 120
        assert config.publish.report_format == "detailed"
        assert config.web.port == 5000

    def test_detection_tuples(self):
        cfg = DetectionConfig.from_dict({"win_stride": [4, 4], "padding": [16, 16]})
        assert cfg.win_stride == (4, 4)
        assert cfg.to_dict()["padding"] == [16, 16]

    def test_round_trip(self):
        config = Config.from_dict({
            "tracking": TrackingConfig(match_policy="first_found", one_to_one=False).to_dict(),
            "publish": PublishConfig(host="broker", port=1884, workers=2).to_dict(),
            "log_level": "DEBUG",
        })
        assert Config.from_dict(config.to_dict()) == config
        assert config.tracking.match_policy == "first_found"
        assert config.publish.workers == 2
