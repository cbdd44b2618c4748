"""Practice problems, quizzes and notes API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from config import Settings
from database import get_db
from shared.models import (
    CreateNoteRequest,
    GenerateProblemsRequest,
    GenerateProblemsResponse,
    GenerateQuizRequest,
    GenerateQuizResponse,
    NoteResponse,
    PracticeProblemItem,
    QuizGradeResponse,
    QuizItem,
    SubmitQuizAnswerRequest,
)
from shared.services.llm_service import LLMService
from shared.utils.exceptions import MathMentorException
from tutor.api.dependencies import get_app_settings, get_llm_service, get_performance_tracker
from tutor.services import ContentGenerator, PerformanceTracker, SessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/learning", tags=["learning"])


def _content_generator(
    db: DBSession = Depends(get_db),
    llm_service: LLMService = Depends(get_llm_service),
    tracker: PerformanceTracker = Depends(get_performance_tracker),
    settings: Settings = Depends(get_app_settings),
) -> ContentGenerator:
    return ContentGenerator(db, llm_service, tracker, max_tokens=settings.generation_max_tokens)


@router.post("/{session_id}/problems", response_model=GenerateProblemsResponse)
def generate_problems(
    session_id: str,
    request: GenerateProblemsRequest,
    generator: ContentGenerator = Depends(_content_generator),
):
    """Generate practice problems. Returns however many were actually saved."""
    try:
        result = generator.generate_problems(session_id, request.topic, request.difficulty, request.count)
        return GenerateProblemsResponse(problems=result.items, count=result.count)
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error generating problems: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating problems: {str(e)}")


@router.get("/{session_id}/problems", response_model=list[PracticeProblemItem])
def list_problems(session_id: str, generator: ContentGenerator = Depends(_content_generator)):
    try:
        return generator.list_problems(session_id)
    except MathMentorException as e:
        raise e.to_http_exception()


@router.post("/{session_id}/quizzes", response_model=GenerateQuizResponse)
def generate_quiz(
    session_id: str,
    request: GenerateQuizRequest,
    generator: ContentGenerator = Depends(_content_generator),
):
    """Generate multiple-choice quizzes. Correct answers are not returned."""
    try:
        result = generator.generate_quiz(session_id, request.topic, request.count)
        return GenerateQuizResponse(quizzes=result.items, count=result.count)
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error generating quiz: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating quiz: {str(e)}")


@router.get("/{session_id}/quizzes", response_model=list[QuizItem])
def list_quizzes(session_id: str, generator: ContentGenerator = Depends(_content_generator)):
    try:
        return generator.list_quizzes(session_id)
    except MathMentorException as e:
        raise e.to_http_exception()


@router.post("/{session_id}/quizzes/{quiz_id}/answer", response_model=QuizGradeResponse)
def submit_quiz_answer(
    session_id: str,
    quiz_id: int,
    request: SubmitQuizAnswerRequest,
    generator: ContentGenerator = Depends(_content_generator),
):
    try:
        return generator.submit_quiz_answer(quiz_id, request.user_answer, session_id)
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error grading quiz {quiz_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error grading quiz: {str(e)}")


@router.post("/{session_id}/notes", response_model=NoteResponse)
def create_note(session_id: str, request: CreateNoteRequest, db: DBSession = Depends(get_db)):
    try:
        return SessionService(db).create_note(session_id, request.note_text, request.category)
    except MathMentorException as e:
        raise e.to_http_exception()


@router.get("/{session_id}/notes", response_model=list[NoteResponse])
def list_notes(session_id: str, db: DBSession = Depends(get_db)):
    try:
        return SessionService(db).list_notes(session_id)
    except MathMentorException as e:
        raise e.to_http_exception()


@router.delete("/notes/{note_id}")
def delete_note(note_id: int, db: DBSession = Depends(get_db)):
    try:
        SessionService(db).delete_note(note_id)
        return {"deleted": True, "note_id": note_id}
    except MathMentorException as e:
        raise e.to_http_exception()
