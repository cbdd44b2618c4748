"""Session, chat log and note management."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import ChatLog, LearningNote, LearningSession
from shared.repositories import ChatLogRepository, LearningSessionRepository, NoteRepository
from shared.utils.exceptions import DatabaseException, NoteNotFoundException, SessionNotFoundException

logger = logging.getLogger("tutor.session_service")


class SessionService:
    """CRUD surface the tutor reads its history from."""

    def __init__(self, db: DBSession):
        self.db = db
        self.sessions = LearningSessionRepository(db)
        self.chat_logs = ChatLogRepository(db)
        self.notes = NoteRepository(db)

    def create_session(self, topic: str, description: Optional[str] = None) -> LearningSession:
        try:
            session = self.sessions.create(topic, description)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("session create", e) from e
        logger.info(f"Created session {session.id} for topic '{topic}'")
        return session

    def get_session(self, session_id: str) -> LearningSession:
        session = self.sessions.get_by_id(session_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session

    def add_message(
        self,
        session_id: str,
        sender: str,
        content: str,
        content_type: str = "text",
    ) -> ChatLog:
        self.get_session(session_id)
        try:
            row = self.chat_logs.add(session_id, sender, content, content_type)
            self.sessions.touch(session_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("chat log save", e) from e
        self.db.refresh(row)
        return row

    def list_messages(self, session_id: str) -> list[ChatLog]:
        self.get_session(session_id)
        return self.chat_logs.list_for_session(session_id)

    def create_note(self, session_id: str, note_text: str, category: Optional[str] = None) -> LearningNote:
        self.get_session(session_id)
        try:
            return self.notes.create(session_id, note_text, category)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("note create", e) from e

    def list_notes(self, session_id: str) -> list[LearningNote]:
        self.get_session(session_id)
        return self.notes.list_for_session(session_id)

    def delete_note(self, note_id: int) -> None:
        if not self.notes.delete(note_id):
            raise NoteNotFoundException(note_id)
