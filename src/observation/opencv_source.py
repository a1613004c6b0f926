"""
Camera and video file frames through cv2.VideoCapture.

device_id is either a camera index (int) or a path to a video file (str).
A camera that returns an empty frame is not treated as an error; a video
file that stops returning frames marks the source exhausted.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, Union

import cv2

from models.config import CameraConfig
from models.frame import FrameData
from .base import ObservationSource, ObservationConfig

# Backoff between open attempts is capped at this many seconds
MAX_BACKOFF_S = 10


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Capture settings for OpenCVSource.

    Attributes:
        device_id: Camera index or video file path.
        max_retries: Open attempts before giving up.
        warmup: Seconds to let a camera settle after it opens.
    """
    device_id: Union[int, str] = 0
    max_retries: int = 3
    warmup: float = 0.5

    @classmethod
    def from_camera_config(cls, camera: CameraConfig, source_id: str = "camera") -> "OpenCVSourceConfig":
        return cls(
            source_id=source_id,
            resolution=tuple(camera.resolution) if camera.resolution else None,
            fps=camera.fps,
            device_id=camera.device_id,
            max_retries=camera.max_retries,
        )


class OpenCVSource(ObservationSource):
    """
    Frame source backed by cv2.VideoCapture.

    Example:
        source = OpenCVSource(OpenCVSourceConfig(device_id=0, resolution=(640, 480)))
        with source:
            frame_data = source.read()
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self.settings = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self.settings.device_id

    @property
    def is_file(self) -> bool:
        return isinstance(self.device_id, str) and os.path.exists(self.device_id)

    def open(self) -> None:
        """
        Open the device, retrying with exponential backoff.

        Raises:
            RuntimeError: If the device cannot be opened after max_retries attempts.
        """
        if self._is_open:
            return

        attempts = max(1, self.settings.max_retries)
        for attempt in range(attempts):
            if attempt > 0:
                delay = min(2 ** attempt, MAX_BACKOFF_S)
                logging.warning(
                    f"Could not open device {self.device_id}, "
                    f"attempt {attempt + 1}/{attempts} in {delay}s"
                )
                time.sleep(delay)

            self._cap = cv2.VideoCapture(self.device_id)
            if self._cap.isOpened():
                break
            self._cap.release()
            self._cap = None
        else:
            raise RuntimeError(f"Unable to open device {self.device_id} after {attempts} attempts")

        self._apply_capture_settings()
        self._is_open = True
        self._is_exhausted = False
        self._frame_index = 0
        logging.info(f"Camera source '{self.source_id}' opened on device {self.device_id}")

    def _apply_capture_settings(self) -> None:
        if self.is_file:
            return

        if self.settings.resolution:
            width, height = self.settings.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
            logging.info(
                f"Requested {width}x{height}, camera gave "
                f"{self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)}x{self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)}"
            )
        if self.settings.fps:
            self._cap.set(cv2.CAP_PROP_FPS, self.settings.fps)

        if self.settings.warmup > 0:
            time.sleep(self.settings.warmup)

    def read(self) -> Optional[FrameData]:
        if self._cap is None or not self._is_open:
            return None

        ok, frame = self._cap.read()
        if ok and frame is not None and frame.size > 0:
            self._frame_index += 1
            return FrameData.from_numpy(frame, frame_index=self._frame_index, source=self.source_id)

        if self.is_file:
            logging.info(f"Video file {self.device_id} finished")
            self._is_exhausted = True
        return None

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"Camera source '{self.source_id}' closed")
        self._is_open = False
