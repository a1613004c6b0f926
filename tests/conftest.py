"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.detection import Detection  # noqa: E402
from publish.transport import Transport  # noqa: E402


class RecordingTransport(Transport):
    """Transport that records payloads and can be told to fail."""

    def __init__(self, fail=False, raise_error=False):
        self.fail = fail
        self.raise_error = raise_error
        self.published = []

    def publish(self, topic, payload):
        if self.raise_error:
            raise ConnectionError("broker unreachable")
        self.published.append((topic, payload))
        return not self.fail


def det(x, y, w, h, confidence=None):
    """Detection helper; confidence defaults to the area heuristic."""
    if confidence is None:
        confidence = min(w * h / 1000.0, 100.0) / 100.0
    return Detection.from_xywh(x, y, w, h, confidence=confidence)


@pytest.fixture
def recording_transport():
    return RecordingTransport()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]

suppression:
  iou_threshold: 0.5

publish:
  host: "localhost"
  port: 1883
  topic: "test/subjects"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [640, 480],
        },
        "suppression": {"iou_threshold": 0.5},
        "tracking": {
            "min_width": 60,
            "min_height": 120,
            "match_policy": "best_overlap",
        },
        "publish": {
            "host": "localhost",
            "port": 1883,
            "qos": 1,
            "report_format": "detailed",
            "max_pending": 8,
            "workers": 1,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def shared_state():
    """The web SharedState singleton, reset around each test."""
    from web.state import state
    state.reset()
    yield state
    state.reset()
