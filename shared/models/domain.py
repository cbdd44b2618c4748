"""Domain models for business logic."""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional


class Difficulty(str, Enum):
    """Difficulty tier used for generation prompts and adaptive tracking."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ContentType(str, Enum):
    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"


class PerformanceSnapshot(BaseModel):
    """Accuracy counters and current difficulty for one session."""
    model_config = ConfigDict(from_attributes=True)

    total_problems: int = Field(0, ge=0)
    correct_answers: int = Field(0, ge=0)
    accuracy_rate: int = Field(0, ge=0, le=100)
    current_difficulty: Difficulty = Difficulty.MEDIUM


class ChatMessage(BaseModel):
    """One entry of the message list sent to the model."""
    role: str  # "system", "user" or "assistant"
    content: str


class ModelChoice(BaseModel):
    """A candidate completion. Content is left untyped; callers validate it."""
    content: Any = None


class ModelResponse(BaseModel):
    """Provider-neutral completion result."""
    choices: List[ModelChoice] = Field(default_factory=list)
    model: Optional[str] = None
