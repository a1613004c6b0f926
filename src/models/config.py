"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    fps: Optional[int] = None
    max_retries: int = 3

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [640, 480]),
            fps=d.get("fps"),
            max_retries=d.get("max_retries", 3),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "max_retries": self.max_retries,
        }


@dataclass
class DetectionConfig:
    """HOG people detector configuration."""
    hit_threshold: float = 0.2
    win_stride: Tuple[int, int] = (8, 8)
    padding: Tuple[int, int] = (32, 32)
    scale: float = 1.05
    final_threshold: float = 5.0
    use_meanshift_grouping: bool = False
    blur_kernel: int = 3

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            hit_threshold=d.get("hit_threshold", 0.2),
            win_stride=tuple(d.get("win_stride", (8, 8))),
            padding=tuple(d.get("padding", (32, 32))),
            scale=d.get("scale", 1.05),
            final_threshold=d.get("final_threshold", 5.0),
            use_meanshift_grouping=d.get("use_meanshift_grouping", False),
            blur_kernel=d.get("blur_kernel", 3),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hit_threshold": self.hit_threshold,
            "win_stride": list(self.win_stride),
            "padding": list(self.padding),
            "scale": self.scale,
            "final_threshold": self.final_threshold,
            "use_meanshift_grouping": self.use_meanshift_grouping,
            "blur_kernel": self.blur_kernel,
        }


@dataclass
class SuppressionConfig:
    """Duplicate box suppression configuration."""
    iou_threshold: float = 0.5

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SuppressionConfig":
        return cls(iou_threshold=d.get("iou_threshold", 0.5))

    def to_dict(self) -> Dict[str, Any]:
        return {"iou_threshold": self.iou_threshold}


@dataclass
class TrackingConfig:
    """Identity tracking configuration."""
    min_width: float = 60
    min_height: float = 120
    match_policy: str = "best_overlap"
    one_to_one: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingConfig":
        return cls(
            min_width=d.get("min_width", 60),
            min_height=d.get("min_height", 120),
            match_policy=d.get("match_policy", "best_overlap"),
            one_to_one=d.get("one_to_one", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_width": self.min_width,
            "min_height": self.min_height,
            "match_policy": self.match_policy,
            "one_to_one": self.one_to_one,
        }


@dataclass
class PublishConfig:
    """Report publishing configuration (MQTT transport + dispatcher)."""
    enabled: bool = True
    host: str = "localhost"
    port: int = 1883
    topic: str = "presence-monitor/subjects"
    qos: int = 1
    client_id: str = ""
    keepalive: int = 60
    publish_timeout: float = 10.0
    report_format: str = "detailed"
    max_pending: int = 8
    workers: int = 1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PublishConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "localhost"),
            port=d.get("port", 1883),
            topic=d.get("topic", "presence-monitor/subjects"),
            qos=d.get("qos", 1),
            client_id=d.get("client_id", ""),
            keepalive=d.get("keepalive", 60),
            publish_timeout=d.get("publish_timeout", 10.0),
            report_format=d.get("report_format", "detailed"),
            max_pending=d.get("max_pending", 8),
            workers=d.get("workers", 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "host": self.host,
            "port": self.port,
            "topic": self.topic,
            "qos": self.qos,
            "client_id": self.client_id,
            "keepalive": self.keepalive,
            "publish_timeout": self.publish_timeout,
            "report_format": self.report_format,
            "max_pending": self.max_pending,
            "workers": self.workers,
        }


@dataclass
class WebConfig:
    """Status API configuration."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    suppression: SuppressionConfig = field(default_factory=SuppressionConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/presence_monitor.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera") or {}),
            detection=DetectionConfig.from_dict(d.get("detection") or {}),
            suppression=SuppressionConfig.from_dict(d.get("suppression") or {}),
            tracking=TrackingConfig.from_dict(d.get("tracking") or {}),
            publish=PublishConfig.from_dict(d.get("publish") or {}),
            web=WebConfig.from_dict(d.get("web") or {}),
            log_path=d.get("log_path", "logs/presence_monitor.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or serving over the API)."""
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "suppression": self.suppression.to_dict(),
            "tracking": self.tracking.to_dict(),
            "publish": self.publish.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
