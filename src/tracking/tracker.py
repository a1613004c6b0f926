"""
Subject tracking module for holding identities across video frames.

Each frame the registry of subjects is rebuilt from the suppressed detections:
a detection that overlaps a subject from the previous frame inherits its
identity, anything else gets a fresh identity. The registry and the identity
counter live on one tracker object and only change under its lock, so a
counter reset can never interleave with an identity allocation.

Publishing is NOT done here. Use `publish.dispatcher.PublishDispatcher` for that.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence, Set

from models.detection import Detection
from models.subject import TrackedSubject, TrackingResult
from .change_gate import registry_changed

MATCH_POLICIES = ("best_overlap", "first_found")


class SubjectTracker:
    """
    Assigns stable identities to detections using box overlap.

    This tracker is responsible for:
    - Ignoring detections below the minimum subject size
    - Matching detections to the previous frame's subjects
    - Allocating identities and resetting the counter when the scene empties
    - Reporting whether the subject set changed
    """

    def __init__(
        self,
        min_width: float = 60,
        min_height: float = 120,
        match_policy: str = "best_overlap",
        one_to_one: bool = True,
    ):
        """
        Initialize the subject tracker.

        Args:
            min_width: Detections must be strictly wider than this to be tracked
            min_height: Detections must be strictly taller than this to be tracked
            match_policy: "best_overlap" picks the overlapping subject with the
                          highest IoU (ties to the lowest identity);
                          "first_found" picks the lowest overlapping identity
            one_to_one: Prevent two detections from claiming one identity
        """
        if match_policy not in MATCH_POLICIES:
            raise ValueError(f"match_policy must be one of: {', '.join(MATCH_POLICIES)}")

        self.min_width = min_width
        self.min_height = min_height
        self.match_policy = match_policy
        self.one_to_one = one_to_one

        self._lock = threading.Lock()
        self._subjects: Dict[int, TrackedSubject] = {}
        self._next_identity = 1

        logging.info("Subject tracker initialized")

    def qualifies(self, detection: Detection) -> bool:
        """Whether a detection is large enough to be tracked."""
        return detection.width > self.min_width and detection.height > self.min_height

    def update(self, detections: Sequence[Detection], frame_index: int = 0) -> TrackingResult:
        """
        Update tracker with the suppressed detections of one frame.

        Args:
            detections: Detections after suppression
            frame_index: Frame number, carried on the result

        Returns:
            TrackingResult with the changed flag and a registry snapshot
        """
        qualifying = [d for d in detections if self.qualifies(d)]

        with self._lock:
            previous = self._subjects

            if not qualifying:
                if not previous:
                    return TrackingResult(changed=False, subjects=(), frame_index=frame_index)
                self._subjects = {}
                self._next_identity = 1
                logging.debug(f"[TRACK] frame={frame_index} registry cleared")
                return TrackingResult(changed=True, subjects=(), frame_index=frame_index)

            current = self._match(qualifying, previous)
            changed = registry_changed(previous, current)
            self._subjects = current
            snapshot = tuple(current.values())

        return TrackingResult(changed=changed, subjects=snapshot, frame_index=frame_index)

    def _match(
        self,
        detections: List[Detection],
        previous: Dict[int, TrackedSubject],
    ) -> Dict[int, TrackedSubject]:
        """Build the new registry. Caller holds the lock."""
        current: Dict[int, TrackedSubject] = {}
        claimed: Set[int] = set()

        for detection in detections:
            identity = self._find_identity(detection, previous, claimed)
            if identity is None:
                identity = self._next_identity
                self._next_identity += 1
            if self.one_to_one:
                claimed.add(identity)

            current[identity] = TrackedSubject(
                identity=identity,
                confidence=detection.confidence,
                bbox=detection.bbox,
            )

        return current

    def _find_identity(
        self,
        detection: Detection,
        previous: Dict[int, TrackedSubject],
        claimed: Set[int],
    ) -> Optional[int]:
        best_identity = None
        best_iou = -1.0

        for identity in sorted(previous):
            if identity in claimed:
                continue
            subject = previous[identity]
            if not subject.bbox.overlaps(detection.bbox):
                continue
            if self.match_policy == "first_found":
                return identity

            # Ascending identity order: strict > keeps the lowest identity on ties
            overlap = subject.bbox.iou(detection.bbox)
            if overlap > best_iou:
                best_iou = overlap
                best_identity = identity

        return best_identity

    def reset(self) -> None:
        """Forget all subjects and restart identities at 1."""
        with self._lock:
            self._subjects = {}
            self._next_identity = 1

    def get_subjects(self) -> List[TrackedSubject]:
        """Snapshot of the current subjects, in registry order."""
        with self._lock:
            return list(self._subjects.values())

    @property
    def next_identity(self) -> int:
        """Identity the next unmatched detection will receive."""
        with self._lock:
            return self._next_identity

    def __len__(self) -> int:
        with self._lock:
            return len(self._subjects)
