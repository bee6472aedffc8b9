"""Rebuild per-part try counters by replaying an attempt's event history.

The scan is a fold over the events, newest first. The first event that
records a try for a part decides that part's counters; older events never
override it. No state survives between calls, so replaying the same history
always yields an equal :class:`ReconstructedState`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Dict, Iterable, Mapping, Optional

from .events import Event, PartTryRecord, Response

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconstructedState:
    """Per-part grading state recovered from history."""

    last_graded_responses: Dict[str, Response] = field(default_factory=dict)
    tries: Dict[str, int] = field(default_factory=dict)
    penalties: Dict[str, float] = field(default_factory=dict)
    fractions: Dict[str, float] = field(default_factory=dict)
    raw_fractions: Dict[str, float] = field(default_factory=dict)

    def has_part(self, part_name: str) -> bool:
        return part_name in self.tries

    def record_for(self, part_name: str) -> Optional[PartTryRecord]:
        return self.records().get(part_name)

    def records(self) -> Dict[str, PartTryRecord]:
        return {
            name: PartTryRecord(
                tries=tries,
                penalty=self.penalties[name],
                fraction=self.fractions[name],
                raw_fraction=self.raw_fractions[name],
            )
            for name, tries in self.tries.items()
        }

    def with_parts(self, records: Mapping[str, PartTryRecord], response: Response) -> "ReconstructedState":
        """Return a copy where ``records`` replace any existing entries."""
        if not records:
            return self
        return ReconstructedState(
            last_graded_responses={**self.last_graded_responses, **{name: dict(response) for name in records}},
            tries={**self.tries, **{name: rec.tries for name, rec in records.items()}},
            penalties={**self.penalties, **{name: rec.penalty for name, rec in records.items()}},
            fractions={**self.fractions, **{name: rec.fraction for name, rec in records.items()}},
            raw_fractions={**self.raw_fractions, **{name: rec.raw_fraction for name, rec in records.items()}},
        )


def _absorb(state: ReconstructedState, event: Event) -> ReconstructedState:
    resolved: Dict[str, PartTryRecord] = {}
    for part_name, entry in event.parts.items():
        if not entry.registered_try or state.has_part(part_name):
            continue
        missing = entry.missing_companions()
        if missing:
            LOGGER.warning(
                "Event %s records a try at part %s without %s; treating them as 0",
                event.sequence,
                part_name,
                ", ".join(missing),
            )
        resolved[part_name] = entry.to_record()
    return state.with_parts(resolved, event.response)


def reconstruct(history: Iterable[Event], *, skip_most_recent: bool = False) -> ReconstructedState:
    """Recover the latest try counters for every part.

    Parameters
    ----------
    history:
        Persisted events of one attempt, newest first.
    skip_most_recent:
        Ignore the newest event. Used when finishing, since that event's
        response is about to be graded again.
    """
    events = list(history)
    if skip_most_recent:
        events = events[1:]
    state = reduce(_absorb, events, ReconstructedState())
    LOGGER.debug("Reconstructed %d graded part(s) from %d event(s)", len(state.tries), len(events))
    return state


__all__ = ["ReconstructedState", "reconstruct"]
