"""
Annotate stage: draws tracked subjects onto a frame for the debug window.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import cv2
import numpy as np

from models.subject import TrackedSubject

# Colors (BGR)
COLOR_SUBJECT = (0, 255, 0)  # Green
COLOR_TEXT = (255, 255, 255)


def subject_label(subject: TrackedSubject) -> str:
    return f"Person {subject.identity}: {subject.confidence_pct:.2f}%"


def draw_subjects(
    frame: np.ndarray,
    subjects: Sequence[TrackedSubject],
    color: Tuple[int, int, int] = COLOR_SUBJECT,
) -> np.ndarray:
    """Draw boxes and labels in place and return the frame."""
    font = cv2.FONT_HERSHEY_SIMPLEX
    for subject in subjects:
        x, y, w, h = subject.bbox.as_int_tuple()
        cv2.rectangle(frame, (x, y), (x + w, y + h), color, 2, cv2.LINE_AA)

        label = subject_label(subject)
        (tw, th), _ = cv2.getTextSize(label, font, 0.5, 1)
        top = max(y - th - 6, 0)
        cv2.rectangle(frame, (x, top), (x + tw + 4, top + th + 6), color, -1)
        cv2.putText(frame, label, (x + 2, top + th + 2), font, 0.5, COLOR_TEXT, 1, cv2.LINE_AA)

    cv2.putText(frame, f"Subjects: {len(subjects)}", (10, 25), font, 0.7, (0, 0, 255), 2)
    return frame
