"""Submission state machine: turns one pending event into a keep/discard decision."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from partcredit.core.config import BehaviourConfig

from .events import Action, Event, PendingEvent, Verdict
from .question import IncompatibleQuestionError, WholeGradable, is_compatible_question
from .scoring import MultiPartScoring, ScoringStrategy, SinglePartScoring
from .states import QuestionState

LOGGER = logging.getLogger(__name__)


class SubmissionStateMachine:
    """Dispatches save / submit / finish / comment actions for one question.

    ``history`` passed to :meth:`process_action` is the attempt's persisted
    events, newest first. The machine keeps no state of its own between
    calls; the pending event is the only thing it writes to.
    """

    def __init__(self, question: Any, scoring: ScoringStrategy, *, config: BehaviourConfig | None = None) -> None:
        self.question = question
        self.scoring = scoring
        self.config = config or BehaviourConfig()

    @classmethod
    def for_question(cls, question: Any, config: BehaviourConfig | None = None) -> "SubmissionStateMachine":
        """Pick the scoring strategy the question supports, preferring per-part grading."""
        if is_compatible_question(question):
            scoring: ScoringStrategy = MultiPartScoring(question)
        elif isinstance(question, WholeGradable):
            scoring = SinglePartScoring(question)
        else:
            raise IncompatibleQuestionError(question, "MultiPartGradable or WholeGradable")
        return cls(question, scoring, config=config)

    @property
    def apply_penalties(self) -> bool:
        return self.config.apply_penalties

    @staticmethod
    def current_state(history: Sequence[Event]) -> QuestionState:
        return history[0].state if history else QuestionState.TODO

    def process_action(self, pending: PendingEvent, history: Sequence[Event]) -> Verdict:
        if pending.action is Action.COMMENT:
            verdict = self.process_comment(pending, history)
        elif pending.action is Action.FINISH:
            verdict = self.process_finish(pending, history)
        elif pending.action is Action.SUBMIT:
            verdict = self.process_submit(pending, history)
        else:
            verdict = self.process_save(pending, history)
        LOGGER.info(
            "%s event %s -> %s (state=%s, fraction=%s)",
            pending.action.value,
            pending.sequence,
            verdict.value,
            pending.state.value,
            pending.fraction,
        )
        return verdict

    # ------------------------------------------------------------------

    def process_save(self, pending: PendingEvent, history: Sequence[Event]) -> Verdict:
        if self.current_state(history).is_finished():
            LOGGER.debug("Attempt already finished; ignoring save event %s", pending.sequence)
            return Verdict.DISCARD
        latest = history[0] if history else None
        if latest is not None and latest.response == pending.response:
            return Verdict.DISCARD
        pending.state = self.current_state(history)
        pending.fraction = latest.fraction if latest is not None else None
        pending.summary = self.scoring.summarise(dict(pending.response))
        return Verdict.KEEP

    def process_submit(self, pending: PendingEvent, history: Sequence[Event]) -> Verdict:
        if self.current_state(history).is_finished():
            LOGGER.debug("Attempt already finished; ignoring submit event %s", pending.sequence)
            return Verdict.DISCARD
        decision = self.scoring.submit(pending, history, apply_penalties=self.apply_penalties)
        if decision is None:
            return Verdict.DISCARD
        pending.fraction = decision.fraction

        if decision.invalid:
            pending.state = QuestionState.INVALID
        elif self.current_state(history) is QuestionState.COMPLETE:
            pending.state = QuestionState.COMPLETE
        elif decision.outcome is QuestionState.FULLY_CORRECT:
            pending.state = QuestionState.COMPLETE
        else:
            pending.state = QuestionState.TODO
        pending.summary = self.scoring.summarise(dict(pending.response))
        return Verdict.KEEP

    def process_finish(self, pending: PendingEvent, history: Sequence[Event]) -> Verdict:
        if self.current_state(history).is_finished():
            LOGGER.debug("Attempt already finished; ignoring finish event %s", pending.sequence)
            return Verdict.DISCARD

        decision = self.scoring.finish(pending, history, apply_penalties=self.apply_penalties)
        pending.fraction = decision.fraction
        pending.state = decision.outcome
        pending.summary = self.scoring.summarise(dict(pending.response))
        return Verdict.KEEP

    def process_comment(self, pending: PendingEvent, history: Sequence[Event]) -> Verdict:
        """Attach a comment without touching the score or the state."""
        latest = history[0] if history else None
        pending.state = self.current_state(history)
        if latest is not None:
            pending.response = dict(latest.response)
            pending.fraction = latest.fraction
            pending.summary = latest.summary
        return Verdict.KEEP


__all__ = ["SubmissionStateMachine"]
