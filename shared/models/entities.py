"""SQLAlchemy ORM database models."""
from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Text, DateTime, Boolean, ForeignKey, Index, Enum,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

DIFFICULTY_LEVELS = ("easy", "medium", "hard")


class LearningSession(Base):
    """Learning session - one tutoring engagement scoped to a topic."""
    __tablename__ = "learning_sessions"

    id = Column(String(64), primary_key=True)
    topic = Column(String(255), nullable=False)  # e.g., "Calculus", "Probability"
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    chat_logs = relationship("ChatLog", back_populates="session", cascade="all, delete-orphan",
                             passive_deletes=True)
    practice_problems = relationship("PracticeProblem", back_populates="session",
                                     cascade="all, delete-orphan", passive_deletes=True)
    quizzes = relationship("Quiz", back_populates="session", cascade="all, delete-orphan",
                           passive_deletes=True)
    notes = relationship("LearningNote", back_populates="session", cascade="all, delete-orphan",
                         passive_deletes=True)
    performance = relationship("SessionPerformance", back_populates="session", uselist=False,
                               cascade="all, delete-orphan", passive_deletes=True)


class ChatLog(Base):
    """Chat log - append-only conversation history between user and tutor."""
    __tablename__ = "chat_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(64), ForeignKey("learning_sessions.id", ondelete="CASCADE"), nullable=False)
    sender = Column(Enum("user", "assistant", name="chat_sender"), nullable=False)
    content = Column(Text, nullable=False)
    content_type = Column(Enum("text", "json", "markdown", name="chat_content_type"),
                          default="text", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("LearningSession", back_populates="chat_logs")

    __table_args__ = (
        Index("idx_chat_logs_session_created", "session_id", "created_at"),
    )


class PracticeProblem(Base):
    """Generated practice problem with its worked solution."""
    __tablename__ = "practice_problems"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(64), ForeignKey("learning_sessions.id", ondelete="CASCADE"), nullable=False)
    problem_text = Column(Text, nullable=False)
    solution = Column(Text, nullable=False)
    difficulty = Column(Enum(*DIFFICULTY_LEVELS, name="problem_difficulty"), default="medium", nullable=False)
    is_solved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("LearningSession", back_populates="practice_problems")

    __table_args__ = (
        Index("idx_practice_problems_session", "session_id"),
    )


class Quiz(Base):
    """Multiple-choice quiz question; graded at most once per submission."""
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(64), ForeignKey("learning_sessions.id", ondelete="CASCADE"), nullable=False)
    question = Column(Text, nullable=False)
    options = Column(Text, nullable=False)  # JSON array of 4 strings
    correct_answer = Column(String(255), nullable=False)
    explanation = Column(Text, nullable=True)
    user_answer = Column(String(255), nullable=True)
    is_correct = Column(Boolean, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("LearningSession", back_populates="quizzes")

    __table_args__ = (
        Index("idx_quizzes_session", "session_id"),
    )


class LearningNote(Base):
    """Free-form learning note attached to a session."""
    __tablename__ = "learning_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(64), ForeignKey("learning_sessions.id", ondelete="CASCADE"), nullable=False)
    note_text = Column(Text, nullable=False)
    category = Column(String(64), nullable=True)  # e.g., "formula", "concept", "tip"
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("LearningSession", back_populates="notes")


class SessionPerformance(Base):
    """
    Per-session accuracy counters and adaptive difficulty.

    One row per session (unique session_id). `version` is bumped on every
    write and used for optimistic locking of the read-modify-write update.
    """
    __tablename__ = "session_performance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(64), ForeignKey("learning_sessions.id", ondelete="CASCADE"),
                        nullable=False, unique=True)
    total_problems = Column(Integer, default=0, nullable=False)
    correct_answers = Column(Integer, default=0, nullable=False)
    accuracy_rate = Column(Integer, default=0, nullable=False)  # 0-100
    current_difficulty = Column(Enum(*DIFFICULTY_LEVELS, name="performance_difficulty"),
                                default="medium", nullable=False)
    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    session = relationship("LearningSession", back_populates="performance")
