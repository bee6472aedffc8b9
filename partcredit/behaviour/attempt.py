"""In-memory attempt history that feeds pending events to the state machine."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from partcredit.core.provenance import ProvenanceLogger

from .events import Action, Event, PendingEvent, Verdict
from .processor import SubmissionStateMachine
from .states import QuestionState

LOGGER = logging.getLogger(__name__)


class QuestionAttempt:
    """Append-only list of events for one learner's attempt at one question."""

    def __init__(
        self,
        machine: SubmissionStateMachine,
        *,
        label: str = "attempt",
        events: Optional[List[Event]] = None,
        provenance: ProvenanceLogger | None = None,
    ) -> None:
        self.machine = machine
        self.label = label
        self._events: List[Event] = list(events or [])
        self.provenance = provenance

    @property
    def events(self) -> Tuple[Event, ...]:
        """Persisted events, oldest first."""
        return tuple(self._events)

    def history(self) -> List[Event]:
        """Persisted events, newest first."""
        return list(reversed(self._events))

    @property
    def latest(self) -> Event | None:
        return self._events[-1] if self._events else None

    @property
    def state(self) -> QuestionState:
        return self.latest.state if self.latest else QuestionState.TODO

    @property
    def fraction(self) -> float | None:
        return self.latest.fraction if self.latest else None

    def process(
        self,
        action: Action | str,
        response: Mapping[str, str] | None = None,
        *,
        comment: str | None = None,
    ) -> Verdict:
        action = Action(action)
        if response is None:
            response = self.latest.response if self.latest else {}
        pending = PendingEvent(
            sequence=len(self._events),
            action=action,
            response=dict(response),
            comment=comment,
        )
        verdict = self.machine.process_action(pending, self.history())
        if verdict is Verdict.KEEP:
            self._events.append(pending.to_event())
        else:
            LOGGER.debug("%s: discarded %s event", self.label, action.value)
        self._record(pending, verdict)
        return verdict

    def save(self, response: Mapping[str, str]) -> Verdict:
        return self.process(Action.SAVE, response)

    def submit(self, response: Mapping[str, str]) -> Verdict:
        return self.process(Action.SUBMIT, response)

    def finish(self, response: Mapping[str, str] | None = None) -> Verdict:
        """Finish the attempt, saving ``response`` first when it changed."""
        if response is not None and not self.state.is_finished():
            self.save(response)
        return self.process(Action.FINISH)

    def comment(self, text: str) -> Verdict:
        return self.process(Action.COMMENT, comment=text)

    def part_tries(self) -> Dict[str, int]:
        """Latest tries counter per part, straight from the newest events."""
        tries: Dict[str, int] = {}
        for event in self.history():
            for part_name, entry in event.parts.items():
                if entry.tries is not None:
                    tries.setdefault(part_name, entry.tries)
        return tries

    def _record(self, pending: PendingEvent, verdict: Verdict) -> None:
        if self.provenance is None:
            return
        self.provenance.log(
            {
                "attempt": self.label,
                "sequence": pending.sequence,
                "action": pending.action.value,
                "verdict": verdict.value,
                "state": pending.state.value if verdict is Verdict.KEEP else None,
                "fraction": pending.fraction if verdict is Verdict.KEEP else None,
                "summary": pending.summary,
                "parts": {name: entry.model_dump() for name, entry in pending.parts.items()},
            }
        )


__all__ = ["QuestionAttempt"]
