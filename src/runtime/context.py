from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Sequence

from models.config import Config
from models.subject import TrackedSubject


@dataclass
class RuntimeContext:
    """Holds runtime state and service references; avoids global singletons."""

    config: Config
    detector: Any
    tracker: Any
    dispatcher: Any
    web_state: Any = None

    def update_frame(self, fps: float, frame_count: int):
        """Mirror loop progress into the web state, if one is attached."""
        if self.web_state is not None:
            self.web_state.update_system_stats(
                {"fps": fps, "last_frame_ts": time.time(), "frame_count": frame_count}
            )

    def update_subjects(self, subjects: Sequence[TrackedSubject]):
        if self.web_state is not None:
            self.web_state.set_subjects(subjects)
