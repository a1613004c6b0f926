"""
ObservationSource interface for pluggable video sources.

Sources deliver one frame per read() call. A None return means no frame is
available right now (an empty camera frame); callers wait briefly and retry.
Finite sources such as video files set `is_exhausted` once they end.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional

from models.frame import FrameData


@dataclass
class ObservationConfig:
    """
    Base configuration for observation sources.

    Attributes:
        source_id: Identifier for this source (e.g., "main-camera").
        resolution: Requested resolution as (width, height). None = source default.
        fps: Requested frames per second. None = source default.
    """
    source_id: str = "default"
    resolution: Optional[tuple[int, int]] = None
    fps: Optional[int] = None


class ObservationSource(ABC):
    """
    A frame producer: open() once, read() until done, close().

    Usable as a context manager; iterating an open source yields frames
    until the first empty read:
        with OpenCVSource(config) as source:
            for frame_data in source:
                engine.process_detections(detector.detect(frame_data.frame))
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._is_exhausted = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_exhausted(self) -> bool:
        """True once a finite source has no more frames."""
        return self._is_exhausted

    @property
    def frame_index(self) -> int:
        """Number of frames read since open."""
        return self._frame_index

    @abstractmethod
    def open(self) -> None:
        """
        Open the source. Must be called before read().

        Raises:
            RuntimeError: If the source cannot be opened.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """Return the next frame, or None when none is available."""

    @abstractmethod
    def close(self) -> None:
        """Release the source. Safe to call multiple times."""

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        """
        Yield frames until the source returns None.

        The source must be open before iterating.
        """
        if not self._is_open:
            raise RuntimeError("Source must be open before iterating")

        while True:
            frame_data = self.read()
            if frame_data is None:
                break
            yield frame_data
