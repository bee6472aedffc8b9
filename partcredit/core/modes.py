"""Helpers for selecting how penalties are applied during a question attempt."""

from __future__ import annotations

import os
from enum import Enum
from typing import List

BEHAVIOUR_ENV = "PARTCREDIT_BEHAVIOUR"


class BehaviourMode(str, Enum):
    """Named behaviours a quiz can prefer for its questions."""

    ADAPTIVE = "adaptive"
    ADAPTIVE_NO_PENALTY = "adaptivenopenalty"

    @classmethod
    def choices(cls) -> List[str]:
        return [member.value for member in cls]

    @property
    def applies_penalties(self) -> bool:
        return self is not BehaviourMode.ADAPTIVE_NO_PENALTY

    def describe(self) -> str:
        return "penalties on" if self.applies_penalties else "penalties off"


def parse_behaviour_mode(value: str | BehaviourMode | None) -> BehaviourMode:
    """
    Convert a config or CLI value into a BehaviourMode.

    Examples
    --------
    - ``None`` or empty string → ``adaptive`` (penalties on).
    - ``adaptivenopenalty`` → penalties disabled.
    - ``Adaptive-No-Penalty`` → same as above; case, dashes and underscores are ignored.
    """
    if isinstance(value, BehaviourMode):
        return value
    if not value:
        return BehaviourMode.ADAPTIVE

    token = value.strip().lower().replace("-", "").replace("_", "")
    try:
        return BehaviourMode(token)
    except ValueError as exc:
        valid = ", ".join(BehaviourMode.choices())
        raise ValueError(f"Unknown behaviour '{value}'. Valid options: {valid}") from exc


def behaviour_from_env(default: str | BehaviourMode | None = None) -> BehaviourMode:
    """Return the behaviour forced by ``PARTCREDIT_BEHAVIOUR``, falling back to ``default``."""

    override = os.getenv(BEHAVIOUR_ENV)
    if override is not None and override.strip():
        return parse_behaviour_mode(override)
    return parse_behaviour_mode(default)


__all__ = ["BEHAVIOUR_ENV", "BehaviourMode", "behaviour_from_env", "parse_behaviour_mode"]
