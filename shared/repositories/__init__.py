"""Data access layer - one repository per entity."""
from .session_repository import LearningSessionRepository
from .chat_log_repository import ChatLogRepository
from .content_repository import PracticeProblemRepository, QuizRepository
from .note_repository import NoteRepository
from .performance_repository import PerformanceRepository

__all__ = [
    "LearningSessionRepository",
    "ChatLogRepository",
    "PracticeProblemRepository",
    "QuizRepository",
    "NoteRepository",
    "PerformanceRepository",
]
