"""Session performance data access layer."""
import logging
from typing import Optional
from sqlalchemy import update
from sqlalchemy.orm import Session as DBSession
from datetime import datetime

from shared.models.entities import SessionPerformance
from shared.utils.constants import DEFAULT_DIFFICULTY

logger = logging.getLogger(__name__)


class PerformanceRepository:
    """Repository for the one-per-session performance row."""

    def __init__(self, db: DBSession):
        self.db = db

    def get_by_session(self, session_id: str) -> Optional[SessionPerformance]:
        return self.db.query(SessionPerformance).filter(
            SessionPerformance.session_id == session_id
        ).first()

    def create(self, session_id: str) -> SessionPerformance:
        """
        Insert a zeroed row and commit.

        Raises:
            sqlalchemy.exc.IntegrityError: when a row for this session already exists
        """
        row = SessionPerformance(
            session_id=session_id,
            total_problems=0,
            correct_answers=0,
            accuracy_rate=0,
            current_difficulty=DEFAULT_DIFFICULTY,
            version=1,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def conditional_update(
        self,
        session_id: str,
        expected_version: int,
        total_problems: int,
        correct_answers: int,
        accuracy_rate: int,
        current_difficulty: str,
    ) -> bool:
        """
        Write new counters only if the row still carries `expected_version`.

        Returns:
            True if the row was written, False if a concurrent writer bumped the version first
        """
        result = self.db.execute(
            update(SessionPerformance)
            .where(
                SessionPerformance.session_id == session_id,
                SessionPerformance.version == expected_version,
            )
            .values(
                total_problems=total_problems,
                correct_answers=correct_answers,
                accuracy_rate=accuracy_rate,
                current_difficulty=current_difficulty,
                version=expected_version + 1,
                updated_at=datetime.utcnow(),
            )
        )
        return result.rowcount > 0
