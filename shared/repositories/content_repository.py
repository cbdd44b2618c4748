"""Practice problem and quiz data access layer."""
import json
import logging
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import PracticeProblem, Quiz

logger = logging.getLogger(__name__)


class PracticeProblemRepository:
    """Repository for generated practice problems."""

    def __init__(self, db: DBSession):
        self.db = db

    def add(self, session_id: str, problem_text: str, solution: str, difficulty: str) -> PracticeProblem:
        """Insert a problem and flush to obtain its id. Commit is left to the caller."""
        row = PracticeProblem(
            session_id=session_id,
            problem_text=problem_text,
            solution=solution,
            difficulty=difficulty,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def list_for_session(self, session_id: str) -> list[PracticeProblem]:
        return (
            self.db.query(PracticeProblem)
            .filter(PracticeProblem.session_id == session_id)
            .order_by(PracticeProblem.id.asc())
            .all()
        )


class QuizRepository:
    """Repository for generated quizzes and their grading state."""

    def __init__(self, db: DBSession):
        self.db = db

    def add(
        self,
        session_id: str,
        question: str,
        options: list[str],
        correct_answer: str,
        explanation: Optional[str],
    ) -> Quiz:
        """Insert a quiz; options are stored JSON-encoded. Commit is left to the caller."""
        row = Quiz(
            session_id=session_id,
            question=question,
            options=json.dumps(options, ensure_ascii=False),
            correct_answer=correct_answer,
            explanation=explanation,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def get_for_session(self, quiz_id: int, session_id: str) -> Optional[Quiz]:
        """Return the quiz only if it belongs to the given session."""
        return self.db.query(Quiz).filter(
            Quiz.id == quiz_id,
            Quiz.session_id == session_id,
        ).first()

    def record_answer(self, quiz: Quiz, user_answer: str, is_correct: bool) -> Quiz:
        """Persist a grading outcome. Last write wins."""
        quiz.user_answer = user_answer
        quiz.is_correct = is_correct
        self.db.commit()
        self.db.refresh(quiz)
        return quiz

    def list_for_session(self, session_id: str) -> list[Quiz]:
        return (
            self.db.query(Quiz)
            .filter(Quiz.session_id == session_id)
            .order_by(Quiz.id.asc())
            .all()
        )

    @staticmethod
    def decode_options(quiz: Quiz) -> list[str]:
        """Decode the stored options column; unreadable values decode to []."""
        try:
            options = json.loads(quiz.options)
        except (TypeError, ValueError):
            logger.warning(f"Quiz {quiz.id} has unreadable options column")
            return []
        return options if isinstance(options, list) else []
