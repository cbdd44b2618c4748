"""Tutor models."""
from tutor.models.generation import (
    GeneratedProblem,
    GeneratedQuiz,
    DiscardedItem,
    GenerationOutcome,
    GenerationResult,
)
