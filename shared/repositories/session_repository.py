"""Learning session data access layer."""
import logging
import uuid
from typing import Optional
from sqlalchemy.orm import Session as DBSession
from datetime import datetime

from shared.models.entities import LearningSession

logger = logging.getLogger(__name__)


class LearningSessionRepository:
    """Repository for learning session CRUD operations."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(self, topic: str, description: Optional[str] = None) -> LearningSession:
        """
        Create a new learning session record.

        Args:
            topic: Subject of the session, e.g. "Calculus"
            description: Optional free-form description

        Returns:
            Created LearningSession
        """
        session = LearningSession(
            id=uuid.uuid4().hex,
            topic=topic,
            description=description,
            created_at=datetime.utcnow(),
            updated_at=datetime.utcnow(),
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def get_by_id(self, session_id: str) -> Optional[LearningSession]:
        """Retrieve session by ID, or None."""
        return self.db.query(LearningSession).filter(LearningSession.id == session_id).first()

    def exists(self, session_id: str) -> bool:
        return self.db.query(LearningSession.id).filter(
            LearningSession.id == session_id
        ).first() is not None

    def touch(self, session_id: str) -> None:
        """Bump updated_at without committing."""
        session = self.get_by_id(session_id)
        if session:
            session.updated_at = datetime.utcnow()

    def delete(self, session_id: str) -> bool:
        """
        Delete a session and everything it owns.

        Returns:
            True if deleted, False if not found
        """
        session = self.get_by_id(session_id)
        if session:
            self.db.delete(session)
            self.db.commit()
            return True
        return False
