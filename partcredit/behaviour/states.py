"""Question attempt states and the fraction → outcome classification."""

from __future__ import annotations

from enum import Enum

# Fractions within this distance of 0 or 1 count as wrong or right.
FRACTION_TOLERANCE = 0.000001


class QuestionState(str, Enum):
    """States a question attempt moves through while being answered."""

    TODO = "todo"
    INVALID = "invalid"
    COMPLETE = "complete"
    FULLY_CORRECT = "gradedright"
    PARTIALLY_CORRECT = "gradedpartial"
    FULLY_INCORRECT = "gradedwrong"
    ABANDONED = "gaveup"

    def is_active(self) -> bool:
        return self in _ACTIVE

    def is_finished(self) -> bool:
        return not self.is_active()

    def is_graded(self) -> bool:
        return self in _GRADED

    def describe(self) -> str:
        return _LABELS[self]


_ACTIVE = frozenset({QuestionState.TODO, QuestionState.INVALID, QuestionState.COMPLETE})
_GRADED = frozenset(
    {QuestionState.FULLY_CORRECT, QuestionState.PARTIALLY_CORRECT, QuestionState.FULLY_INCORRECT}
)
_LABELS = {
    QuestionState.TODO: "Not complete",
    QuestionState.INVALID: "Invalid answer",
    QuestionState.COMPLETE: "Complete",
    QuestionState.FULLY_CORRECT: "Correct",
    QuestionState.PARTIALLY_CORRECT: "Partially correct",
    QuestionState.FULLY_INCORRECT: "Incorrect",
    QuestionState.ABANDONED: "Not answered",
}


def graded_state_for_fraction(fraction: float) -> QuestionState:
    """Classify a fraction: <= 0 wrong, >= 1 right, anything between partial."""
    if fraction < FRACTION_TOLERANCE:
        return QuestionState.FULLY_INCORRECT
    if fraction > 1.0 - FRACTION_TOLERANCE:
        return QuestionState.FULLY_CORRECT
    return QuestionState.PARTIALLY_CORRECT


__all__ = ["FRACTION_TOLERANCE", "QuestionState", "graded_state_for_fraction"]
