"""
Tests for SubjectTracker identity assignment and the change gate.
"""

import threading

import pytest

from conftest import det
from models.detection import BoundingBox
from models.subject import TrackedSubject
from tracking.change_gate import registry_changed
from tracking.tracker import SubjectTracker


class TestTrackerBasics:
    """Basic tracker functionality tests."""

    def test_tracker_init(self):
        """Tracker initializes with default parameters."""
        tracker = SubjectTracker()

        assert tracker.min_width == 60
        assert tracker.min_height == 120
        assert tracker.match_policy == "best_overlap"
        assert tracker.one_to_one is True
        assert len(tracker) == 0
        assert tracker.next_identity == 1

    def test_invalid_match_policy(self):
        with pytest.raises(ValueError):
            SubjectTracker(match_policy="closest")

    def test_empty_detections_on_empty_registry(self):
        """No detections and nothing tracked is not a change."""
        tracker = SubjectTracker()

        result = tracker.update([])

        assert result.changed is False
        assert result.subjects == ()

    def test_size_filter(self):
        """Boxes must be strictly larger than 60x120 to be tracked."""
        tracker = SubjectTracker()

        result = tracker.update([det(0, 0, 60, 200), det(100, 0, 100, 120), det(300, 0, 61, 121)])

        assert result.identities == (1,)
        assert result.subjects[0].bbox == BoundingBox(300, 0, 61, 121)

    def test_only_small_boxes_counts_as_empty(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200)])

        result = tracker.update([det(0, 0, 10, 10)])

        assert result.changed is True
        assert result.subjects == ()
        assert tracker.next_identity == 1


class TestIdentityAssignment:
    """Identity reuse and allocation across frames."""

    def test_new_subjects_get_sequential_identities(self):
        tracker = SubjectTracker()

        result = tracker.update([det(0, 0, 100, 200), det(300, 0, 100, 200)])

        assert result.changed is True
        assert result.identities == (1, 2)
        assert tracker.next_identity == 3

    def test_overlapping_box_reuses_identity(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200)])

        result = tracker.update([det(10, 10, 100, 200)])

        assert result.identities == (1,)
        assert tracker.next_identity == 2

    def test_same_geometry_and_confidence_unchanged(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200)])

        result = tracker.update([det(10, 10, 100, 200)])

        # Same area -> same confidence; boxes overlap
        assert result.changed is False

    def test_confidence_change_reports_changed(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200, confidence=0.2)])

        result = tracker.update([det(10, 10, 100, 200, confidence=0.3)])

        assert result.identities == (1,)
        assert result.changed is True

    def test_identical_frames_unchanged(self):
        tracker = SubjectTracker()
        frame = [det(0, 0, 100, 200), det(300, 0, 80, 150)]
        tracker.update(frame)

        result = tracker.update(list(frame))

        assert result.changed is False
        assert result.identities == (1, 2)

    def test_non_overlapping_move_gets_new_identity(self):
        """A jump clear of the previous box is a new subject and a change."""
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200)])

        result = tracker.update([det(200, 200, 100, 200)])

        assert result.changed is True
        assert result.identities == (2,)

    def test_subject_leaving_is_a_change(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200), det(300, 0, 100, 200)])

        result = tracker.update([det(0, 0, 100, 200)])

        assert result.changed is True
        assert result.identities == (1,)
        # Counter is not reset while the registry is non-empty
        assert tracker.next_identity == 3

    def test_registry_replaced_wholesale(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200)])
        tracker.update([det(400, 0, 100, 200)])

        subjects = tracker.get_subjects()

        assert [s.identity for s in subjects] == [2]


class TestRegistryReset:
    def test_empty_frame_clears_and_resets_counter(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200), det(300, 0, 100, 200)])

        result = tracker.update([])

        assert result.changed is True
        assert result.subjects == ()
        assert len(tracker) == 0
        assert tracker.next_identity == 1

    def test_second_empty_frame_unchanged(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200)])
        tracker.update([])

        result = tracker.update([])

        assert result.changed is False

    def test_identities_restart_after_reset(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200), det(300, 0, 100, 200)])
        tracker.update([])

        result = tracker.update([det(500, 0, 100, 200)])

        assert result.identities == (1,)

    def test_manual_reset(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200)])

        tracker.reset()

        assert len(tracker) == 0
        assert tracker.next_identity == 1


class TestMatchingPolicy:
    """Deterministic tie-breaking and one-to-one matching."""

    def _two_subjects(self, tracker):
        # id 1 on the left, id 2 on the right, both 100x200
        tracker.update([det(0, 0, 100, 200), det(150, 0, 100, 200)])

    def test_best_overlap_prefers_highest_iou(self):
        tracker = SubjectTracker()
        self._two_subjects(tracker)

        # Overlaps id 1 by 10px and id 2 by 40px
        result = tracker.update([det(90, 0, 100, 200)])

        assert result.identities == (2,)

    def test_first_found_prefers_lowest_identity(self):
        tracker = SubjectTracker(match_policy="first_found")
        self._two_subjects(tracker)

        result = tracker.update([det(90, 0, 100, 200)])

        assert result.identities == (1,)

    def test_equal_overlap_ties_to_lowest_identity(self):
        tracker = SubjectTracker()
        self._two_subjects(tracker)

        # Overlaps both subjects by 25px
        result = tracker.update([det(75, 0, 100, 200)])

        assert result.identities == (1,)

    def test_one_to_one_second_claimant_gets_new_identity(self):
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 200, 200)])

        result = tracker.update([det(0, 0, 100, 200), det(100, 0, 100, 200)])

        assert result.identities == (1, 2)
        assert len(result.subjects) == 2

    def test_without_one_to_one_later_claimant_wins(self):
        tracker = SubjectTracker(one_to_one=False)
        tracker.update([det(0, 0, 200, 200)])

        result = tracker.update([det(0, 0, 100, 200), det(100, 0, 100, 200)])

        assert result.identities == (1,)
        assert result.subjects[0].bbox == BoundingBox(100, 0, 100, 200)

    def test_one_to_one_falls_back_to_next_overlap(self):
        tracker = SubjectTracker()
        self._two_subjects(tracker)

        # Both boxes prefer id 2; the second one still overlaps id 1
        result = tracker.update([det(140, 0, 100, 200), det(80, 0, 100, 200)])

        assert result.identities == (2, 1)


class TestMoveScenario:
    def test_reuse_then_break_overlap(self):
        """id 1 reused while overlapping; breaking overlap is a change."""
        tracker = SubjectTracker()
        tracker.update([det(0, 0, 100, 200)])

        reused = tracker.update([det(10, 10, 100, 200)])
        moved = tracker.update([det(300, 300, 100, 200)])

        assert reused.identities == (1,)
        assert reused.changed is False
        assert moved.changed is True
        assert moved.identities == (2,)


class TestConcurrency:
    def test_parallel_updates_never_share_identities(self):
        """Allocation and reset are serialized under the tracker lock."""
        tracker = SubjectTracker()
        errors = []

        def worker(offset):
            try:
                for i in range(200):
                    if i % 10 == 0:
                        tracker.update([])
                    else:
                        x = offset + (i % 3) * 50
                        result = tracker.update([det(x, 0, 100, 200), det(x + 400, 0, 100, 200)])
                        assert len(result.subjects) == 2
                        assert min(result.identities) >= 1
            except AssertionError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(k * 1000,)) for k in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []


class TestChangeGate:
    def _subject(self, identity, x, confidence=0.2):
        return TrackedSubject(identity=identity, confidence=confidence, bbox=BoundingBox(x, 0, 100, 200))

    def test_equal_registries(self):
        prev = {1: self._subject(1, 0)}
        cur = {1: self._subject(1, 5)}
        assert registry_changed(prev, cur) is False

    def test_both_empty(self):
        assert registry_changed({}, {}) is False

    def test_identity_added(self):
        prev = {1: self._subject(1, 0)}
        cur = {1: self._subject(1, 0), 2: self._subject(2, 300)}
        assert registry_changed(prev, cur) is True

    def test_moved_without_overlap(self):
        prev = {1: self._subject(1, 0)}
        cur = {1: self._subject(1, 500)}
        assert registry_changed(prev, cur) is True

    def test_confidence_differs(self):
        prev = {1: self._subject(1, 0, confidence=0.2)}
        cur = {1: self._subject(1, 0, confidence=0.25)}
        assert registry_changed(prev, cur) is True

    def test_same_entity_ignores_confidence(self):
        a = self._subject(1, 0, confidence=0.2)
        b = self._subject(1, 10, confidence=0.9)
        assert a.same_entity(b)
        assert not a.matches(b)
