"""Chat log data access layer."""
import logging
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import ChatLog

logger = logging.getLogger(__name__)


class ChatLogRepository:
    """Append-only access to a session's conversation history."""

    def __init__(self, db: DBSession):
        self.db = db

    def add(self, session_id: str, sender: str, content: str, content_type: str = "text") -> ChatLog:
        """Append one message. Flushes only; the caller owns the commit."""
        row = ChatLog(
            session_id=session_id,
            sender=sender,
            content=content,
            content_type=content_type,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def list_for_session(self, session_id: str) -> list[ChatLog]:
        """Return every message of the session in chronological order."""
        return (
            self.db.query(ChatLog)
            .filter(ChatLog.session_id == session_id)
            .order_by(ChatLog.created_at.asc(), ChatLog.id.asc())
            .all()
        )
