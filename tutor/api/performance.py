"""Session performance API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from database import get_db
from shared.models import PerformanceSnapshot, UpdatePerformanceRequest
from shared.repositories import LearningSessionRepository
from shared.utils.exceptions import MathMentorException, SessionNotFoundException
from tutor.api.dependencies import get_performance_tracker
from tutor.services import PerformanceTracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/performance", tags=["performance"])


@router.get("/{session_id}", response_model=PerformanceSnapshot)
def get_performance(
    session_id: str,
    db: DBSession = Depends(get_db),
    tracker: PerformanceTracker = Depends(get_performance_tracker),
):
    """Current counters; a session with no answers yet reports zeros at medium."""
    try:
        if not LearningSessionRepository(db).exists(session_id):
            raise SessionNotFoundException(session_id)
        return PerformanceSnapshot.model_validate(tracker.get_or_create(session_id))
    except MathMentorException as e:
        raise e.to_http_exception()


@router.post("/{session_id}", response_model=PerformanceSnapshot)
def update_performance(
    session_id: str,
    request: UpdatePerformanceRequest,
    db: DBSession = Depends(get_db),
    tracker: PerformanceTracker = Depends(get_performance_tracker),
):
    """Record one answer outcome."""
    try:
        if not LearningSessionRepository(db).exists(session_id):
            raise SessionNotFoundException(session_id)
        return tracker.update(session_id, request.is_correct)
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error updating performance: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating performance: {str(e)}")
