"""Session and chat log API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from database import get_db
from shared.models import AddMessageRequest, ChatLogResponse, CreateSessionRequest, SessionResponse
from shared.utils.exceptions import MathMentorException
from tutor.services import SessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionResponse)
def create_session(request: CreateSessionRequest, db: DBSession = Depends(get_db)):
    """Create a new learning session."""
    try:
        service = SessionService(db)
        return service.create_session(request.topic, request.description)
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error creating session: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating session: {str(e)}")


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, db: DBSession = Depends(get_db)):
    try:
        return SessionService(db).get_session(session_id)
    except MathMentorException as e:
        raise e.to_http_exception()


@router.get("/{session_id}/messages", response_model=list[ChatLogResponse])
def list_messages(session_id: str, db: DBSession = Depends(get_db)):
    """Conversation history, oldest first."""
    try:
        return SessionService(db).list_messages(session_id)
    except MathMentorException as e:
        raise e.to_http_exception()


@router.post("/{session_id}/messages", response_model=ChatLogResponse)
def add_message(session_id: str, request: AddMessageRequest, db: DBSession = Depends(get_db)):
    """
    Append a message to the chat log directly.

    POST /chat/{session_id}/message already records both the user turn and
    the tutor reply, so clients using it must not post those turns here too.
    """
    try:
        service = SessionService(db)
        return service.add_message(
            session_id,
            request.sender.value,
            request.content,
            request.content_type.value,
        )
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error adding message: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error adding message: {str(e)}")
