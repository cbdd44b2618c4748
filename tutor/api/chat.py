"""Tutor chat API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from config import Settings
from database import get_db
from shared.models import (
    EvaluateAnswerRequest,
    EvaluateAnswerResponse,
    SendMessageRequest,
    SendMessageResponse,
)
from shared.services.llm_service import LLMService
from shared.utils.exceptions import MathMentorException
from tutor.api.dependencies import (
    get_app_settings,
    get_classifier,
    get_llm_service,
    get_performance_tracker,
)
from tutor.services import ChatService, CorrectnessClassifier, PerformanceTracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def _chat_service(
    db: DBSession = Depends(get_db),
    llm_service: LLMService = Depends(get_llm_service),
    classifier: CorrectnessClassifier = Depends(get_classifier),
    tracker: PerformanceTracker = Depends(get_performance_tracker),
    settings: Settings = Depends(get_app_settings),
) -> ChatService:
    return ChatService(db, llm_service, classifier, tracker, max_tokens=settings.chat_max_tokens)


@router.post("/{session_id}/message", response_model=SendMessageResponse)
def send_message(
    session_id: str,
    request: SendMessageRequest,
    service: ChatService = Depends(_chat_service),
):
    """Send a learner message and get the tutor's reply."""
    try:
        return service.send_message(session_id, request.message)
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error sending message: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error sending message: {str(e)}")


@router.post("/{session_id}/evaluate", response_model=EvaluateAnswerResponse)
def evaluate_answer(
    session_id: str,
    request: EvaluateAnswerRequest,
    service: ChatService = Depends(_chat_service),
):
    """Get an explicit verdict on an answer."""
    try:
        return service.evaluate_answer(session_id, request.question, request.user_answer)
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error evaluating answer: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error evaluating answer: {str(e)}")
