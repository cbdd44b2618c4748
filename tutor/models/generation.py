"""
Generation Models

Candidate shapes accepted from the model and the results of a generation run.
"""

from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field

from shared.utils.constants import QUIZ_OPTION_COUNT

T = TypeVar("T")


class GeneratedProblem(BaseModel):
    """A practice problem candidate as produced by the model."""

    model_config = ConfigDict(str_strip_whitespace=True)

    problem: str = Field(min_length=1, description="Problem statement")
    solution: str = Field(min_length=1, description="Worked, step-by-step solution")


class GeneratedQuiz(BaseModel):
    """A multiple-choice quiz candidate as produced by the model."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=QUIZ_OPTION_COUNT, max_length=QUIZ_OPTION_COUNT)
    correct_answer: str = Field(alias="correctAnswer", min_length=1, description="Option letter A-D")
    explanation: str = Field(description="Why the correct answer is correct")


class DiscardedItem(BaseModel):
    """A candidate that was dropped, with the position it had in the model output."""

    index: int
    reason: str


class GenerationOutcome(BaseModel, Generic[T]):
    """Accumulated result of folding over the extracted candidates."""

    saved: list[T] = Field(default_factory=list)
    discarded: list[DiscardedItem] = Field(default_factory=list)

    def keep(self, item: T) -> None:
        self.saved.append(item)

    def discard(self, index: int, reason: str) -> None:
        self.discarded.append(DiscardedItem(index=index, reason=reason))


class GenerationResult(BaseModel, Generic[T]):
    """What callers get back: the persisted items and how many there are."""

    items: list[T] = Field(default_factory=list)
    count: int = 0
    discarded_count: int = 0
    error: Optional[str] = Field(default=None, description="Set when the model call itself failed")

    @classmethod
    def empty(cls, error: Optional[str] = None) -> "GenerationResult[Any]":
        return cls(items=[], count=0, error=error)
