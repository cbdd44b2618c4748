"""
Practice content generation and quiz grading.

Generation is soft-fail: model trouble, unparseable output or a failing
insert never turns into an error for the caller, only into fewer items.
"""

import logging
from typing import Any, Callable, Optional, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from shared.models.domain import Difficulty
from shared.models.schemas import PracticeProblemItem, QuizGradeResponse, QuizItem
from shared.repositories import (
    LearningSessionRepository,
    PracticeProblemRepository,
    QuizRepository,
)
from shared.services.llm_service import LLMService
from shared.utils.constants import DEFAULT_DIFFICULTY, DEFAULT_GENERATION_COUNT, GENERATION_MAX_TOKENS
from shared.utils.exceptions import (
    DatabaseException,
    LLMProviderException,
    MalformedModelResponseException,
    QuizNotFoundException,
    SessionNotFoundException,
)
from tutor.models.generation import GeneratedProblem, GeneratedQuiz, GenerationOutcome, GenerationResult
from tutor.prompts.templates import PRACTICE_PROBLEMS_TEMPLATE, QUIZ_TEMPLATE
from tutor.services.conversation_service import ConversationOrchestrator
from tutor.services.performance_service import PerformanceTracker
from tutor.utils.json_extraction import extract_array

logger = logging.getLogger("tutor.content_service")


class ContentGenerator:
    """Generates, validates and stores practice problems and quizzes."""

    def __init__(
        self,
        db: DBSession,
        llm_service: LLMService,
        performance_tracker: Optional[PerformanceTracker] = None,
        max_tokens: int = GENERATION_MAX_TOKENS,
    ):
        self.db = db
        self.conversation = ConversationOrchestrator(db, llm_service)
        self.performance = performance_tracker or PerformanceTracker(db)
        self.sessions = LearningSessionRepository(db)
        self.problems = PracticeProblemRepository(db)
        self.quizzes = QuizRepository(db)
        self.max_tokens = max_tokens

    # ─── Practice problems ────────────────────────────────────────────

    def generate_problems(
        self,
        session_id: str,
        topic: str,
        difficulty: Optional[Difficulty] = None,
        count: int = DEFAULT_GENERATION_COUNT,
    ) -> GenerationResult[PracticeProblemItem]:
        """
        Ask the model for `count` problems and persist every valid one.

        The returned count is the number actually saved, which may be lower
        than requested (including zero).
        """
        self._require_session(session_id)
        level = self._resolve_difficulty(session_id, difficulty)
        prompt = PRACTICE_PROBLEMS_TEMPLATE.render(count=count, topic=topic, difficulty=level)

        raw, error = self._request_candidates(session_id, prompt)
        if error:
            return GenerationResult.empty(error)

        outcome = self._persist_candidates(
            extract_array(raw),
            GeneratedProblem,
            lambda p: self.problems.add(session_id, p.problem, p.solution, level),
        )
        error = self._commit("practice problem save")
        if error:
            return GenerationResult.empty(error)

        items = [
            PracticeProblemItem(
                id=row.id,
                problem=row.problem_text,
                solution=row.solution,
                difficulty=row.difficulty,
            )
            for row in outcome.saved
        ]
        logger.info(
            f"Generated {len(items)}/{count} problems for session {session_id} "
            f"({len(outcome.discarded)} discarded)"
        )
        return GenerationResult(items=items, count=len(items), discarded_count=len(outcome.discarded))

    # ─── Quizzes ──────────────────────────────────────────────────────

    def generate_quiz(
        self,
        session_id: str,
        topic: str,
        count: int = DEFAULT_GENERATION_COUNT,
    ) -> GenerationResult[QuizItem]:
        """Ask the model for `count` multiple-choice questions and persist every valid one."""
        self._require_session(session_id)
        prompt = QUIZ_TEMPLATE.render(count=count, topic=topic)

        raw, error = self._request_candidates(session_id, prompt)
        if error:
            return GenerationResult.empty(error)

        outcome = self._persist_candidates(
            extract_array(raw),
            GeneratedQuiz,
            lambda q: self.quizzes.add(session_id, q.question, q.options, q.correct_answer, q.explanation),
        )
        error = self._commit("quiz save")
        if error:
            return GenerationResult.empty(error)

        items = [self._quiz_item(row) for row in outcome.saved]
        logger.info(
            f"Generated {len(items)}/{count} quizzes for session {session_id} "
            f"({len(outcome.discarded)} discarded)"
        )
        return GenerationResult(items=items, count=len(items), discarded_count=len(outcome.discarded))

    def submit_quiz_answer(self, quiz_id: int, user_answer: str, session_id: str) -> QuizGradeResponse:
        """
        Grade an answer by exact, case-sensitive comparison and record it.

        The performance update that follows is best effort: its failure is
        logged and does not affect the grade.
        """
        quiz = self.quizzes.get_for_session(quiz_id, session_id)
        if quiz is None:
            raise QuizNotFoundException(quiz_id, session_id)

        is_correct = quiz.correct_answer == user_answer
        try:
            self.quizzes.record_answer(quiz, user_answer, is_correct)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("quiz answer save", e) from e

        try:
            self.performance.update(session_id, is_correct)
        except Exception:
            logger.exception(f"Performance update after quiz {quiz_id} failed; grade kept")

        return QuizGradeResponse(
            is_correct=is_correct,
            correct_answer=quiz.correct_answer,
            explanation=quiz.explanation,
        )

    # ─── Listing ──────────────────────────────────────────────────────

    def list_problems(self, session_id: str) -> list[PracticeProblemItem]:
        self._require_session(session_id)
        return [
            PracticeProblemItem(
                id=row.id,
                problem=row.problem_text,
                solution=row.solution,
                difficulty=row.difficulty,
            )
            for row in self.problems.list_for_session(session_id)
        ]

    def list_quizzes(self, session_id: str) -> list[QuizItem]:
        self._require_session(session_id)
        return [self._quiz_item(row) for row in self.quizzes.list_for_session(session_id)]

    # ─── Helpers ──────────────────────────────────────────────────────

    def _require_session(self, session_id: str) -> None:
        if not self.sessions.exists(session_id):
            raise SessionNotFoundException(session_id)

    def _resolve_difficulty(self, session_id: str, difficulty: Optional[Difficulty]) -> str:
        """Explicit difficulty wins; otherwise the tracked one; otherwise medium."""
        if difficulty is not None:
            return Difficulty(difficulty).value
        snapshot = self.performance.get(session_id)
        if snapshot is None:
            return DEFAULT_DIFFICULTY
        return snapshot.current_difficulty.value

    def _request_candidates(self, session_id: str, prompt: str) -> tuple[Optional[str], Optional[str]]:
        """Return (raw_text, None) on success or (None, error) when the model call failed."""
        messages = self.conversation.build_messages(session_id, prompt)
        try:
            return self.conversation.complete(messages, max_tokens=self.max_tokens), None
        except (LLMProviderException, MalformedModelResponseException) as e:
            logger.warning(f"Generation for session {session_id} produced nothing: {e}")
            return None, str(e)

    def _persist_candidates(
        self,
        candidates: list[dict],
        schema: Type[BaseModel],
        save: Callable[[Any], Any],
    ) -> GenerationOutcome:
        """Validate and save each candidate in its own savepoint."""
        outcome = GenerationOutcome()
        for index, candidate in enumerate(candidates):
            try:
                item = schema.model_validate(candidate)
            except ValidationError as e:
                reason = f"invalid shape: {e.error_count()} error(s)"
                logger.warning(f"Discarding candidate {index}: {reason}")
                outcome.discard(index, reason)
                continue

            try:
                with self.db.begin_nested():
                    row = save(item)
            except SQLAlchemyError as e:
                logger.warning(f"Discarding candidate {index}: insert failed: {e}")
                outcome.discard(index, f"insert failed: {type(e).__name__}")
                continue

            outcome.keep(row)
        return outcome

    def _commit(self, operation: str) -> Optional[str]:
        """Commit the batch; on failure roll back and return the reason instead of raising."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"{operation} failed, nothing persisted: {e}")
            return f"{operation} failed: {type(e).__name__}"
        return None

    def _quiz_item(self, row) -> QuizItem:
        return QuizItem(
            id=row.id,
            question=row.question,
            options=QuizRepository.decode_options(row),
            explanation=row.explanation,
            user_answer=row.user_answer,
            is_correct=row.is_correct,
        )
