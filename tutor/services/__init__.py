"""Tutor services."""
from tutor.services.correctness import CorrectnessClassifier, MarkerCorrectnessClassifier
from tutor.services.performance_service import PerformanceTracker, compute_accuracy, next_difficulty
from tutor.services.conversation_service import ConversationOrchestrator
from tutor.services.content_service import ContentGenerator
from tutor.services.chat_service import ChatService
from tutor.services.research_service import ResearchService
from tutor.services.session_service import SessionService
