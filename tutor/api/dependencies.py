"""Request-scoped access to the process-wide objects built in main.create_app()."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session as DBSession

from config import Settings, get_settings
from database import get_db
from shared.services.llm_service import LLMService
from tutor.services.correctness import CorrectnessClassifier, MarkerCorrectnessClassifier
from tutor.services.performance_service import PerformanceTracker


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_llm_service(request: Request) -> LLMService:
    llm_service = getattr(request.app.state, "llm_service", None)
    if llm_service is None:
        raise RuntimeError("LLMService is not initialized; start the app through main.create_app()")
    return llm_service


def get_classifier(request: Request) -> CorrectnessClassifier:
    return getattr(request.app.state, "classifier", None) or MarkerCorrectnessClassifier()


def get_performance_tracker(
    db: DBSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PerformanceTracker:
    return PerformanceTracker(db, max_attempts=settings.performance_update_max_attempts)
