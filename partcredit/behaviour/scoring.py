"""Scoring strategies plugged into the submission state machine.

A strategy decides *what* a submit or finish is worth; the state machine
decides which state the attempt moves to. ``MultiPartScoring`` grades each
part separately from the reconstructed history, ``SinglePartScoring`` grades
the whole response as one try.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from .aggregator import aggregate
from .events import Event, PendingEvent, Response
from .history import reconstruct
from .question import MultiPartGradable, WholeGradable, ensure_multipart, ensure_whole
from .states import QuestionState, graded_state_for_fraction
from .updater import apply_part_scores

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GradeDecision:
    """Fraction and outcome computed for one pending event."""

    fraction: Optional[float]
    outcome: QuestionState
    invalid: bool = False


class ScoringStrategy(Protocol):
    name: str

    def submit(self, pending: PendingEvent, history: Sequence[Event], *, apply_penalties: bool) -> GradeDecision | None:
        """Grade a submit; ``None`` means the event adds nothing and should be discarded."""
        ...

    def finish(self, pending: PendingEvent, history: Sequence[Event], *, apply_penalties: bool) -> GradeDecision:
        ...

    def summarise(self, response: Response) -> str:
        ...


def _final_response(pending: PendingEvent, history: Sequence[Event]) -> Response:
    # Finishing grades what the learner last left behind, not the (usually empty) finish event.
    return dict(history[0].response) if history else dict(pending.response)


class MultiPartScoring:
    """Each part registers its own tries and penalties."""

    name = "multipart"

    def __init__(self, question: MultiPartGradable) -> None:
        self.question = ensure_multipart(question)

    def summarise(self, response: Response) -> str:
        return self.question.summarise_response(response)

    def _grade(self, pending: PendingEvent, history: Sequence[Event], *, final: bool, apply_penalties: bool) -> GradeDecision:
        state = reconstruct(history, skip_most_recent=final)
        scores = self.question.grade_parts_that_can_be_graded(
            dict(pending.response), state.last_graded_responses, final
        )
        LOGGER.debug("Graded %d part(s) as new tries: %s", len(scores), ", ".join(sorted(scores)) or "-")
        state = apply_part_scores(state, scores, pending, apply_penalties=apply_penalties)
        result = aggregate(self.question.get_parts_and_weights(), state)
        return GradeDecision(fraction=result.fraction, outcome=result.outcome)

    def submit(self, pending: PendingEvent, history: Sequence[Event], *, apply_penalties: bool) -> GradeDecision:
        decision = self._grade(pending, history, final=False, apply_penalties=apply_penalties)
        if self.question.is_any_part_invalid(dict(pending.response)):
            return GradeDecision(fraction=decision.fraction, outcome=decision.outcome, invalid=True)
        return decision

    def finish(self, pending: PendingEvent, history: Sequence[Event], *, apply_penalties: bool) -> GradeDecision:
        pending.response = _final_response(pending, history)
        return self._grade(pending, history, final=True, apply_penalties=apply_penalties)


class SinglePartScoring:
    """The whole response is one try; each earlier try costs ``question.penalty``."""

    name = "singlepart"

    def __init__(self, question: WholeGradable) -> None:
        self.question = ensure_whole(question)

    def summarise(self, response: Response) -> str:
        return self.question.summarise_response(response)

    @staticmethod
    def _previous_tries(history: Sequence[Event]) -> int:
        return next((event.tries for event in history if event.tries is not None), 0)

    @staticmethod
    def _previous_best(history: Sequence[Event]) -> Optional[float]:
        """Best fraction so far, or None while nothing has been graded."""
        return next((event.fraction for event in history if event.fraction is not None), None)

    @staticmethod
    def _last_graded(history: Sequence[Event]) -> Event | None:
        return next((event for event in history if event.tries is not None), None)

    def _adjusted(self, fraction: float, prev_tries: int, prev_best: Optional[float], apply_penalties: bool) -> float:
        if apply_penalties:
            fraction -= self.question.penalty * prev_tries
        return fraction if prev_best is None else max(prev_best, fraction)

    def submit(self, pending: PendingEvent, history: Sequence[Event], *, apply_penalties: bool) -> GradeDecision | None:
        prev_best = self._previous_best(history)
        response = dict(pending.response)
        if not self.question.is_complete_response(response):
            return GradeDecision(fraction=prev_best, outcome=QuestionState.TODO, invalid=True)

        last_graded = self._last_graded(history)
        if last_graded is not None and self.question.is_same_response(dict(last_graded.response), response):
            LOGGER.debug("Response matches the last graded try; nothing new to grade")
            return None

        prev_tries = self._previous_tries(history)
        raw, outcome = self.question.grade_response(response)
        pending.tries = prev_tries + 1
        pending.raw_fraction = raw
        fraction = self._adjusted(raw, prev_tries, prev_best, apply_penalties)
        return GradeDecision(fraction=fraction, outcome=outcome)

    def finish(self, pending: PendingEvent, history: Sequence[Event], *, apply_penalties: bool) -> GradeDecision:
        response = _final_response(pending, history)
        pending.response = response
        prev_best = self._previous_best(history)
        if not self.question.is_complete_response(response):
            return GradeDecision(fraction=prev_best, outcome=QuestionState.ABANDONED)

        latest = history[0] if history else None
        if latest is not None and latest.tries is not None and latest.raw_fraction is not None:
            # The last event already graded this exact response.
            return GradeDecision(fraction=prev_best, outcome=graded_state_for_fraction(latest.raw_fraction))

        prev_tries = self._previous_tries(history)
        raw, outcome = self.question.grade_response(response)
        pending.tries = prev_tries + 1
        pending.raw_fraction = raw
        fraction = self._adjusted(raw, prev_tries, prev_best, apply_penalties)
        return GradeDecision(fraction=fraction, outcome=outcome)


__all__ = ["GradeDecision", "MultiPartScoring", "ScoringStrategy", "SinglePartScoring"]
