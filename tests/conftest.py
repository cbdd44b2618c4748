"""Pytest configuration and shared fixtures."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from config import Settings
from database import configure_sqlite_engine, get_db
from shared.models.domain import ModelChoice, ModelResponse
# Import all models to ensure they are registered with Base.metadata
from shared.models.entities import *
from shared.services.llm_service import LLMService
from tutor.services.correctness import MarkerCorrectnessClassifier


@pytest.fixture(scope="function")
def db_session():
    """
    Create a test database session with in-memory SQLite.

    A single shared connection (StaticPool) lets the TestClient worker
    thread see the same database as the test body. Foreign keys are on so
    cascades behave as in production.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    configure_sqlite_engine(engine)

    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def learning_session(db_session):
    """A persisted learning session to hang content off."""
    row = LearningSession(id="sess-1", topic="Calculus", description="Derivatives")
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def fake_llm(mocker):
    """LLMService double; set `fake_llm.chat.return_value` per test."""
    llm = mocker.Mock(spec=LLMService)
    llm.chat.return_value = ModelResponse(choices=[ModelChoice(content="Let's get started!")])
    return llm


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite:///:memory:",
        llm_provider="openai",
        openai_api_key="test-key",
        log_level="WARNING",
    )


@pytest.fixture
def client(db_session, fake_llm, test_settings):
    """
    Test client for a freshly built app.

    The lifespan is not entered, so collaborators are attached directly and
    get_db is overridden to hand out the in-memory session.
    """
    from main import create_app

    app = create_app(test_settings)
    app.state.llm_service = fake_llm
    app.state.classifier = MarkerCorrectnessClassifier()

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)
