"""
Correctness inference.

Turns the tutor's free-text reply into a tri-state signal:
True (the learner was right), False (wrong) or None (no verdict found).
"""

from typing import Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class CorrectnessClassifier(Protocol):
    """Anything that can read a verdict out of a model reply."""

    def infer(self, response_text: str) -> Optional[bool]:
        ...


INCORRECT_MARKERS: tuple[str, ...] = (
    "not quite",
    "incorrect",
    "not correct",
    "isn't correct",
    "unfortunately",
    "wrong",
    "mistake",
    "not right",
    "try again",
    "almost",
    "close, but",
    "不正解",
    "間違",
    "残念",
    "惜しい",
    "違います",
    "正しくありません",
)

CORRECT_MARKERS: tuple[str, ...] = (
    "correct",
    "well done",
    "great job",
    "that's right",
    "exactly",
    "excellent",
    "perfect",
    "good job",
    "正解",
    "正しい",
    "その通り",
    "よくできました",
    "素晴らしい",
)


class MarkerCorrectnessClassifier:
    """
    Keyword classifier over the lowered reply text.

    Incorrect markers are checked before correct ones, so "incorrect" never
    reads as "correct" and "不正解" never reads as "正解".
    """

    def __init__(
        self,
        incorrect_markers: Sequence[str] = INCORRECT_MARKERS,
        correct_markers: Sequence[str] = CORRECT_MARKERS,
    ):
        self.incorrect_markers = tuple(m.lower() for m in incorrect_markers)
        self.correct_markers = tuple(m.lower() for m in correct_markers)

    def infer(self, response_text: str) -> Optional[bool]:
        if not isinstance(response_text, str) or not response_text:
            return None

        lowered = response_text.lower()
        if any(marker in lowered for marker in self.incorrect_markers):
            return False
        if any(marker in lowered for marker in self.correct_markers):
            return True
        return None
