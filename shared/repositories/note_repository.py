"""Learning note data access layer."""
import logging
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import LearningNote

logger = logging.getLogger(__name__)


class NoteRepository:
    """Repository for learning note CRUD operations."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(self, session_id: str, note_text: str, category: Optional[str] = None) -> LearningNote:
        note = LearningNote(session_id=session_id, note_text=note_text, category=category)
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        return note

    def get_by_id(self, note_id: int) -> Optional[LearningNote]:
        return self.db.query(LearningNote).filter(LearningNote.id == note_id).first()

    def list_for_session(self, session_id: str) -> list[LearningNote]:
        return (
            self.db.query(LearningNote)
            .filter(LearningNote.session_id == session_id)
            .order_by(LearningNote.created_at.desc(), LearningNote.id.desc())
            .all()
        )

    def delete(self, note_id: int) -> bool:
        """
        Delete a note.

        Returns:
            True if deleted, False if not found
        """
        note = self.get_by_id(note_id)
        if note:
            self.db.delete(note)
            self.db.commit()
            return True
        return False
