"""
Math Mentor Backend - FastAPI Application

Entry point for the conversational math tutoring API. The process-wide
collaborators (database manager, LLM service, correctness classifier) are
built once here and handed to request handlers through app.state.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, get_settings, validate_required_settings
from database import DatabaseManager
from shared.api import health
from shared.services.llm_service import LLMService
from tutor.api import chat, learning, performance, research, sessions
from tutor.services.correctness import MarkerCorrectnessClassifier

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build shared collaborators on startup and release them on shutdown."""
    settings: Settings = app.state.settings
    logger.info("Starting Math Mentor Backend...")
    validate_required_settings(settings)

    if getattr(app.state, "db_manager", None) is None:
        app.state.db_manager = DatabaseManager(settings)
    app.state.db_manager.create_tables()
    if not app.state.db_manager.health_check():
        logger.warning("Database health check failed on startup")

    if getattr(app.state, "llm_service", None) is None:
        app.state.llm_service = LLMService.from_settings(settings)
    if getattr(app.state, "classifier", None) is None:
        app.state.classifier = MarkerCorrectnessClassifier()

    logger.info(f"Application started (provider={settings.llm_provider}, model={settings.llm_model})")
    yield

    app.state.db_manager.close()
    logger.info("Application stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Math Mentor Backend",
        description="Conversational math tutoring API with adaptive difficulty",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(sessions.router)
    app.include_router(chat.router)
    app.include_router(learning.router)
    app.include_router(performance.router)
    app.include_router(research.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
