"""
Tracking module.

The canonical tracker implementation is in tracking.tracker.
"""

from .change_gate import registry_changed
from .tracker import SubjectTracker

__all__ = ["SubjectTracker", "registry_changed"]
