"""
Performance tracking.

Keeps one counters row per session and drives the adaptive difficulty
state machine from answer outcomes.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from shared.models.domain import Difficulty, PerformanceSnapshot
from shared.models.entities import SessionPerformance
from shared.repositories import PerformanceRepository
from shared.utils.constants import (
    HARD_ACCURACY_THRESHOLD,
    MEDIUM_ACCURACY_THRESHOLD,
    MIN_ATTEMPTS_FOR_DIFFICULTY_CHANGE,
)
from shared.utils.exceptions import DatabaseException, StaleStateError

logger = logging.getLogger("tutor.performance_service")

DEFAULT_MAX_ATTEMPTS = 5


def compute_accuracy(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half up. 0 when nothing was attempted."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def next_difficulty(total: int, accuracy: int, current: str) -> str:
    """Difficulty after an answer; frozen until enough attempts exist."""
    if total < MIN_ATTEMPTS_FOR_DIFFICULTY_CHANGE:
        return current
    if accuracy >= HARD_ACCURACY_THRESHOLD:
        return Difficulty.HARD.value
    if accuracy >= MEDIUM_ACCURACY_THRESHOLD:
        return Difficulty.MEDIUM.value
    return Difficulty.EASY.value


class PerformanceTracker:
    """Read-modify-write of session counters under optimistic locking."""

    def __init__(self, db: DBSession, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self.db = db
        self.repo = PerformanceRepository(db)
        self.max_attempts = max(1, max_attempts)

    def get_or_create(self, session_id: str) -> SessionPerformance:
        """
        Return the session's performance row, creating a zeroed one if absent.

        A concurrent creator winning the unique constraint is not an error:
        the existing row is re-read and returned.
        """
        row = self.repo.get_by_session(session_id)
        if row is not None:
            return row

        try:
            return self.repo.create(session_id)
        except IntegrityError as e:
            self.db.rollback()
            row = self.repo.get_by_session(session_id)
            if row is None:
                raise DatabaseException("performance create", e) from e
            logger.info(f"Performance row for session {session_id} created concurrently; reusing it")
            return row
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("performance create", e) from e

    def get(self, session_id: str) -> Optional[PerformanceSnapshot]:
        row = self.repo.get_by_session(session_id)
        return PerformanceSnapshot.model_validate(row) if row else None

    def update(self, session_id: str, is_correct: bool) -> PerformanceSnapshot:
        """
        Record one answer outcome.

        Raises:
            StaleStateError: when concurrent writers keep winning for max_attempts tries
            DatabaseException: on storage failure
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                row = self.get_or_create(session_id)
                expected_version = row.version

                total = row.total_problems + 1
                correct = row.correct_answers + (1 if is_correct else 0)
                accuracy = compute_accuracy(correct, total)
                difficulty = next_difficulty(total, accuracy, row.current_difficulty)

                written = self.repo.conditional_update(
                    session_id,
                    expected_version,
                    total_problems=total,
                    correct_answers=correct,
                    accuracy_rate=accuracy,
                    current_difficulty=difficulty,
                )
                if written:
                    self.db.commit()
                    return PerformanceSnapshot(
                        total_problems=total,
                        correct_answers=correct,
                        accuracy_rate=accuracy,
                        current_difficulty=difficulty,
                    )

                self.db.rollback()
                logger.warning(
                    f"Performance version conflict for session {session_id} "
                    f"(attempt {attempt}/{self.max_attempts}, expected version {expected_version})"
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                raise DatabaseException("performance update", e) from e

        raise StaleStateError(
            f"Performance for session {session_id} was modified concurrently; "
            f"gave up after {self.max_attempts} attempts"
        )
