"""Shared models: ORM entities, domain types and API schemas."""
from .entities import (
    Base,
    LearningSession,
    ChatLog,
    PracticeProblem,
    Quiz,
    LearningNote,
    SessionPerformance,
)
from .domain import (
    Difficulty,
    Sender,
    ContentType,
    PerformanceSnapshot,
    ChatMessage,
    ModelChoice,
    ModelResponse,
)
from .schemas import *  # noqa: F401,F403
