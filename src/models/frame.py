"""
FrameData model for captured video frames.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np


@dataclass
class FrameData:
    """
    A captured frame plus capture metadata.

    Attributes:
        frame: Image as a numpy array (BGR).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix time of capture.
        frame_index: 1-based frame counter since the source was opened.
        source: Identifier of the observation source.
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float = field(default_factory=time.time)
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        frame_index: int = 0,
        source: Optional[str] = None,
        timestamp: Optional[float] = None,
    ) -> "FrameData":
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp if timestamp is not None else time.time(),
            frame_index=frame_index,
            source=source,
        )

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
