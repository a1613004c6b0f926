"""
Change gate: decides whether the tracked subject set differs between frames.
"""

from __future__ import annotations

from typing import Mapping

from models.subject import TrackedSubject


def registry_changed(
    previous: Mapping[int, TrackedSubject],
    current: Mapping[int, TrackedSubject],
) -> bool:
    """
    Compare two subject registries.

    The registries are equal when they hold the same identities and every
    identity's subject still overlaps its previous box with the same
    confidence. A subject that kept its identity but moved clear of its old
    box counts as a change.
    """
    if previous.keys() != current.keys():
        return True
    for identity, subject in current.items():
        if not subject.matches(previous[identity]):
            return True
    return False
