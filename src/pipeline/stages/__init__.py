"""
Pipeline stages for the presence monitor.

- annotate: draw tracked subjects for the debug window
"""

from .annotate import draw_subjects, subject_label

__all__ = ["draw_subjects", "subject_label"]
