"""Combine per-part results into an overall fraction and outcome."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .history import ReconstructedState
from .states import QuestionState, graded_state_for_fraction


@dataclass(frozen=True, slots=True)
class Aggregate:
    """Overall result for the question; ``fraction`` is None when nothing was graded."""

    fraction: Optional[float]
    outcome: QuestionState

    def as_dict(self) -> dict:
        return {"fraction": self.fraction, "outcome": self.outcome.value}


def weighted_fraction(weights: Mapping[str, float], fractions: Mapping[str, float]) -> float:
    """Weighted mean of the part fractions over *all* weighted parts.

    Ungraded parts contribute 0 but still count in the denominator.
    """
    total_weight = sum(weights.values())
    if total_weight <= 0:
        raise ValueError("Part weights must sum to a positive number")
    total = sum(weight * fractions.get(part_name, 0.0) for part_name, weight in weights.items())
    return total / total_weight


def classify(weights: Mapping[str, float], raw_fractions: Mapping[str, float]) -> QuestionState:
    all_right = True
    all_wrong = True
    for part_name in weights:
        if part_name not in raw_fractions:
            all_right = False
            continue
        part_state = graded_state_for_fraction(raw_fractions[part_name])
        if part_state is not QuestionState.FULLY_CORRECT:
            all_right = False
        if part_state is not QuestionState.FULLY_INCORRECT:
            all_wrong = False

    if all_right:
        return QuestionState.FULLY_CORRECT
    if all_wrong:
        return QuestionState.FULLY_INCORRECT
    return QuestionState.PARTIALLY_CORRECT


def aggregate(weights: Mapping[str, float], state: ReconstructedState) -> Aggregate:
    if not state.fractions or sum(weights.values()) <= 0:
        return Aggregate(fraction=None, outcome=QuestionState.ABANDONED)
    return Aggregate(
        fraction=weighted_fraction(weights, state.fractions),
        outcome=classify(weights, state.raw_fractions),
    )


__all__ = ["Aggregate", "aggregate", "classify", "weighted_fraction"]
