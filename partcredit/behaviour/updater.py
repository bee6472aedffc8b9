"""Merge freshly graded parts into the reconstructed per-part state."""

from __future__ import annotations

import logging
from typing import Dict, Mapping

from .events import PartScoreResult, PartTryRecord, PendingEvent
from .history import ReconstructedState

LOGGER = logging.getLogger(__name__)


def next_record(prior: PartTryRecord | None, result: PartScoreResult, *, apply_penalties: bool) -> PartTryRecord:
    """Counters for a part after one more graded try.

    The best net fraction never drops, and it is always computed against the
    penalty accumulated *including* this try.
    """
    prior = prior or PartTryRecord()
    penalty = prior.penalty + result.penalty if apply_penalties else 0.0
    fraction = max(prior.fraction, result.raw_fraction - penalty)
    return PartTryRecord(
        tries=prior.tries + 1,
        penalty=penalty,
        fraction=fraction,
        raw_fraction=result.raw_fraction,
    )


def apply_part_scores(
    state: ReconstructedState,
    scores: Mapping[str, PartScoreResult],
    pending: PendingEvent,
    *,
    apply_penalties: bool,
) -> ReconstructedState:
    """Record one new try per scored part on ``pending`` and return the merged state."""
    if not scores:
        LOGGER.debug("No part counted as a new try; nothing to record")
        return state

    updated: Dict[str, PartTryRecord] = {}
    for part_name, result in scores.items():
        record = next_record(state.record_for(part_name), result, apply_penalties=apply_penalties)
        pending.record_part(part_name, record)
        updated[part_name] = record
        LOGGER.debug(
            "Part %s try %d: raw %.4f, penalty %.4f, best %.4f",
            part_name,
            record.tries,
            record.raw_fraction,
            record.penalty,
            record.fraction,
        )
    return state.with_parts(updated, pending.response)


__all__ = ["apply_part_scores", "next_record"]
