"""Unit tests for tutor/services/performance_service.py

Pure state-machine helpers are tested directly; the tracker runs against the
in-memory SQLite db_session fixture.
"""

import pytest
from unittest.mock import patch
from sqlalchemy.exc import IntegrityError, OperationalError

from shared.models.domain import Difficulty, PerformanceSnapshot
from shared.models.entities import SessionPerformance
from shared.utils.exceptions import DatabaseException, StaleStateError
from tutor.services.performance_service import (
    PerformanceTracker,
    compute_accuracy,
    next_difficulty,
)


def _rows(db_session, session_id="sess-1"):
    return db_session.query(SessionPerformance).filter_by(session_id=session_id).all()


# ===========================================================================
# compute_accuracy
# ===========================================================================

class TestComputeAccuracy:
    @pytest.mark.parametrize("correct,total,expected", [
        (0, 0, 0),
        (0, 1, 0),
        (1, 1, 100),
        (1, 2, 50),
        (2, 3, 67),
        (1, 3, 33),
        (3, 4, 75),
        (4, 5, 80),
        (1, 8, 13),   # 12.5 rounds half up
        (5, 8, 63),   # 62.5 rounds half up
    ])
    def test_rounding(self, correct, total, expected):
        assert compute_accuracy(correct, total) == expected


# ===========================================================================
# next_difficulty
# ===========================================================================

class TestNextDifficulty:
    @pytest.mark.parametrize("total", [1, 2])
    def test_frozen_below_three_attempts(self, total):
        assert next_difficulty(total, 100, "medium") == "medium"
        assert next_difficulty(total, 0, "hard") == "hard"

    @pytest.mark.parametrize("accuracy,expected", [
        (100, "hard"),
        (80, "hard"),
        (79, "medium"),
        (60, "medium"),
        (59, "easy"),
        (0, "easy"),
    ])
    def test_thresholds(self, accuracy, expected):
        assert next_difficulty(3, accuracy, "medium") == expected


# ===========================================================================
# get_or_create
# ===========================================================================

class TestGetOrCreate:
    def test_creates_zeroed_row(self, db_session, learning_session):
        row = PerformanceTracker(db_session).get_or_create("sess-1")

        assert row.total_problems == 0
        assert row.correct_answers == 0
        assert row.accuracy_rate == 0
        assert row.current_difficulty == "medium"
        assert row.version == 1

    def test_twice_yields_one_row(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session)
        first = tracker.get_or_create("sess-1")
        second = tracker.get_or_create("sess-1")

        assert first.id == second.id
        assert len(_rows(db_session)) == 1

    def test_concurrent_insert_rereads_existing_row(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session)
        existing = SessionPerformance(session_id="sess-1", total_problems=4, correct_answers=2,
                                      accuracy_rate=50, current_difficulty="easy", version=3)
        db_session.add(existing)
        db_session.commit()

        # Simulate a reader that saw no row, then lost the insert race
        with patch.object(tracker.repo, "get_by_session", side_effect=[None, existing]), \
             patch.object(tracker.repo, "create",
                          side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))):
            row = tracker.get_or_create("sess-1")

        assert row.total_problems == 4
        assert len(_rows(db_session)) == 1

    def test_unknown_session_is_storage_error(self, db_session):
        with pytest.raises(DatabaseException):
            PerformanceTracker(db_session).get_or_create("missing")


# ===========================================================================
# update
# ===========================================================================

class TestUpdate:
    def test_first_correct_answer(self, db_session, learning_session):
        snap = PerformanceTracker(db_session).update("sess-1", True)

        assert snap == PerformanceSnapshot(total_problems=1, correct_answers=1,
                                           accuracy_rate=100, current_difficulty=Difficulty.MEDIUM)

    def test_worked_scenario(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session)

        tracker.update("sess-1", True)
        snap = tracker.update("sess-1", False)
        assert (snap.total_problems, snap.correct_answers, snap.accuracy_rate) == (2, 1, 50)
        assert snap.current_difficulty == Difficulty.MEDIUM

        snap = tracker.update("sess-1", True)
        assert (snap.total_problems, snap.correct_answers, snap.accuracy_rate) == (3, 2, 67)
        assert snap.current_difficulty == Difficulty.MEDIUM

        snap = tracker.update("sess-1", True)
        assert (snap.total_problems, snap.correct_answers, snap.accuracy_rate) == (4, 3, 75)
        assert snap.current_difficulty == Difficulty.MEDIUM

        snap = tracker.update("sess-1", True)
        assert (snap.total_problems, snap.correct_answers, snap.accuracy_rate) == (5, 4, 80)
        assert snap.current_difficulty == Difficulty.HARD

    def test_drops_to_easy(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session)
        for _ in range(3):
            snap = tracker.update("sess-1", False)

        assert snap.current_difficulty == Difficulty.EASY
        assert snap.accuracy_rate == 0

    def test_persists_and_bumps_version(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session)
        tracker.update("sess-1", True)
        tracker.update("sess-1", True)

        db_session.expire_all()
        row = _rows(db_session)[0]
        assert row.total_problems == 2
        assert row.version == 3

    def test_correct_never_exceeds_total(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session)
        for outcome in (True, True, False, True, False, True):
            snap = tracker.update("sess-1", outcome)
            assert 0 <= snap.correct_answers <= snap.total_problems
            assert 0 <= snap.accuracy_rate <= 100

    def test_retries_after_version_conflict(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session, max_attempts=3)
        real_update = tracker.repo.conditional_update
        calls = {"n": 0}

        def _flaky(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                return False
            return real_update(*args, **kwargs)

        with patch.object(tracker.repo, "conditional_update", side_effect=_flaky):
            snap = tracker.update("sess-1", True)

        assert calls["n"] == 2
        assert snap.total_problems == 1

    def test_gives_up_with_stale_state(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session, max_attempts=2)

        with patch.object(tracker.repo, "conditional_update", return_value=False) as mock_update:
            with pytest.raises(StaleStateError):
                tracker.update("sess-1", True)

        assert mock_update.call_count == 2

    def test_storage_failure_becomes_database_exception(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session)

        with patch.object(tracker.repo, "conditional_update",
                          side_effect=OperationalError("UPDATE", {}, Exception("disk I/O error"))):
            with pytest.raises(DatabaseException):
                tracker.update("sess-1", True)


# ===========================================================================
# get
# ===========================================================================

class TestGet:
    def test_none_before_any_answer(self, db_session, learning_session):
        assert PerformanceTracker(db_session).get("sess-1") is None

    def test_snapshot_after_update(self, db_session, learning_session):
        tracker = PerformanceTracker(db_session)
        tracker.update("sess-1", False)

        snap = tracker.get("sess-1")
        assert snap.total_problems == 1
        assert snap.correct_answers == 0
