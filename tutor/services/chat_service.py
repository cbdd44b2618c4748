"""
Chat service - the tutor conversation surface.

A turn is: converse with the model, record both sides in the chat log,
read a correctness verdict out of the reply and, when there is one, feed
it to the performance tracker.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from shared.models.domain import ContentType, Sender
from shared.models.schemas import EvaluateAnswerResponse, SendMessageResponse
from shared.repositories import ChatLogRepository, LearningSessionRepository
from shared.services.llm_service import LLMService
from shared.utils.constants import CHAT_MAX_TOKENS
from shared.utils.exceptions import DatabaseException, SessionNotFoundException
from tutor.prompts.templates import ANSWER_EVALUATION_TEMPLATE, MATH_MENTOR_SYSTEM_PROMPT
from tutor.services.conversation_service import ConversationOrchestrator
from tutor.services.correctness import CorrectnessClassifier, MarkerCorrectnessClassifier
from tutor.services.performance_service import PerformanceTracker

logger = logging.getLogger("tutor.chat_service")


class ChatService:
    """Math Mentor conversation with answer evaluation."""

    def __init__(
        self,
        db: DBSession,
        llm_service: LLMService,
        classifier: Optional[CorrectnessClassifier] = None,
        performance_tracker: Optional[PerformanceTracker] = None,
        max_tokens: int = CHAT_MAX_TOKENS,
    ):
        self.db = db
        self.conversation = ConversationOrchestrator(db, llm_service)
        self.classifier = classifier or MarkerCorrectnessClassifier()
        self.performance = performance_tracker or PerformanceTracker(db)
        self.sessions = LearningSessionRepository(db)
        self.chat_logs = ChatLogRepository(db)
        self.max_tokens = max_tokens

    def send_message(self, session_id: str, message: str) -> SendMessageResponse:
        """
        Send a learner message and return the tutor's reply.

        The reply is treated as an answer evaluation whenever a verdict can be
        read from it.
        """
        self._require_session(session_id)

        reply = self.conversation.converse(
            session_id,
            message,
            MATH_MENTOR_SYSTEM_PROMPT,
            max_tokens=self.max_tokens,
        )

        try:
            self.chat_logs.add(session_id, Sender.USER.value, message, ContentType.TEXT.value)
            self.chat_logs.add(session_id, Sender.ASSISTANT.value, reply, ContentType.MARKDOWN.value)
            self.sessions.touch(session_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("chat log save", e) from e

        is_correct = self.classifier.infer(reply)
        if is_correct is not None:
            self._record_outcome(session_id, is_correct)

        return SendMessageResponse(
            response=reply,
            content_type=ContentType.MARKDOWN,
            is_answer_evaluation=is_correct is not None,
            is_correct=is_correct,
        )

    def evaluate_answer(self, session_id: str, question: str, user_answer: str) -> EvaluateAnswerResponse:
        """Ask the tutor for an explicit verdict on an answer to a given question."""
        self._require_session(session_id)

        prompt = ANSWER_EVALUATION_TEMPLATE.render(question=question, user_answer=user_answer)
        messages = self.conversation.build_messages(session_id, MATH_MENTOR_SYSTEM_PROMPT, prompt)
        evaluation = self.conversation.complete(messages, max_tokens=self.max_tokens)

        is_correct = self.classifier.infer(evaluation)
        if is_correct is not None:
            self._record_outcome(session_id, is_correct)
        else:
            logger.info(f"No verdict found in evaluation for session {session_id}")

        return EvaluateAnswerResponse(evaluation=evaluation, is_correct=is_correct)

    def _record_outcome(self, session_id: str, is_correct: bool) -> None:
        try:
            self.performance.update(session_id, is_correct)
        except Exception:
            logger.exception(f"Performance update for session {session_id} failed; reply kept")

    def _require_session(self, session_id: str) -> None:
        if not self.sessions.exists(session_id):
            raise SessionNotFoundException(session_id)
