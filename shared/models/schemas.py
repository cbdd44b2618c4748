"""Pydantic API request/response schemas."""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any, Optional

from shared.utils.constants import DEFAULT_GENERATION_COUNT, MAX_GENERATION_COUNT, MIN_GENERATION_COUNT
from .domain import ContentType, Difficulty, Sender


# Sessions and chat logs

class CreateSessionRequest(BaseModel):
    """Request to create a new learning session."""
    topic: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class SessionResponse(BaseModel):
    """Learning session record."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    topic: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AddMessageRequest(BaseModel):
    """Append a message to a session's chat log."""
    sender: Sender
    content: str
    content_type: ContentType = ContentType.TEXT


class ChatLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: str
    sender: Sender
    content: str
    content_type: ContentType
    created_at: datetime


# Chat

class SendMessageRequest(BaseModel):
    message: str = Field(..., min_length=1)


class SendMessageResponse(BaseModel):
    """Tutor reply plus the correctness signal inferred from it."""
    response: str
    content_type: ContentType = ContentType.MARKDOWN
    is_answer_evaluation: bool
    is_correct: Optional[bool] = None


class EvaluateAnswerRequest(BaseModel):
    question: str = Field(..., min_length=1)
    user_answer: str


class EvaluateAnswerResponse(BaseModel):
    evaluation: str
    is_correct: Optional[bool] = None


# Practice problems and quizzes

class GenerateProblemsRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    difficulty: Optional[Difficulty] = None
    count: int = Field(DEFAULT_GENERATION_COUNT, ge=MIN_GENERATION_COUNT, le=MAX_GENERATION_COUNT)


class GenerateQuizRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    count: int = Field(DEFAULT_GENERATION_COUNT, ge=MIN_GENERATION_COUNT, le=MAX_GENERATION_COUNT)


class PracticeProblemItem(BaseModel):
    id: int
    problem: str
    solution: str
    difficulty: Difficulty


class QuizItem(BaseModel):
    """Quiz as shown to the learner; the correct answer stays server-side."""
    id: int
    question: str
    options: List[str]
    explanation: Optional[str] = None
    user_answer: Optional[str] = None
    is_correct: Optional[bool] = None


class GenerateProblemsResponse(BaseModel):
    problems: List[PracticeProblemItem]
    count: int


class GenerateQuizResponse(BaseModel):
    quizzes: List[QuizItem]
    count: int


class SubmitQuizAnswerRequest(BaseModel):
    user_answer: str


class QuizGradeResponse(BaseModel):
    is_correct: bool
    correct_answer: str
    explanation: Optional[str] = None


# Notes

class CreateNoteRequest(BaseModel):
    note_text: str = Field(..., min_length=1)
    category: Optional[str] = None


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: str
    note_text: str
    category: Optional[str] = None
    created_at: datetime


# Performance

class UpdatePerformanceRequest(BaseModel):
    is_correct: bool


# Research

class AnalyzeQuestionRequest(BaseModel):
    question: str = Field(..., min_length=1)


class ScenarioRequest(BaseModel):
    scenario: str = Field(..., min_length=1)


class ApplyTheoryRequest(BaseModel):
    theory: str = Field(..., min_length=1)
    context: str = Field(..., min_length=1)


class GraphDataRequest(BaseModel):
    description: str = Field(..., min_length=1)


class ResearchResponse(BaseModel):
    content: str
    content_type: ContentType = ContentType.MARKDOWN


class GraphDataResponse(BaseModel):
    graph: Dict[str, Any]
