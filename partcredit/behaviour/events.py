"""Typed attempt events and the per-part records persisted on them."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .states import QuestionState

Response = Dict[str, str]

_PART_VARIABLE = re.compile(r"^_(tries|penalty|fraction|rawfraction)_(.+)$")
_PART_FIELDS = {
    "tries": "tries",
    "penalty": "penalty",
    "fraction": "fraction",
    "rawfraction": "raw_fraction",
}
_WHOLE_VARIABLES = {"_try": "tries", "_rawfraction": "raw_fraction"}


class Action(str, Enum):
    """What the learner asked for when the pending event was created."""

    SAVE = "save"
    SUBMIT = "submit"
    FINISH = "finish"
    COMMENT = "comment"


class Verdict(str, Enum):
    """Whether the collaborator should persist the pending event."""

    KEEP = "keep"
    DISCARD = "discard"


class PartScoreResult(BaseModel):
    """Result of grading one try at one part."""

    model_config = ConfigDict(frozen=True)

    part_name: str
    raw_fraction: float
    penalty: float = Field(default=0.0, ge=0.0)


class PartTryRecord(BaseModel):
    """Latest try counters for a part, as reconstructed from history."""

    model_config = ConfigDict(frozen=True)

    tries: int = Field(default=0, ge=0)
    penalty: float = Field(default=0.0, ge=0.0)
    fraction: float = 0.0
    raw_fraction: float = 0.0


class PartTryEntry(BaseModel):
    """Per-part values stored on one event.

    Fields are optional because older or hand-edited histories may carry a
    tries counter without its companions.
    """

    tries: Optional[int] = None
    penalty: Optional[float] = None
    fraction: Optional[float] = None
    raw_fraction: Optional[float] = None

    @property
    def registered_try(self) -> bool:
        return self.tries is not None

    def missing_companions(self) -> list[str]:
        return [name for name in ("penalty", "fraction", "raw_fraction") if getattr(self, name) is None]

    def to_record(self) -> PartTryRecord:
        return PartTryRecord(
            tries=self.tries or 0,
            penalty=max(self.penalty or 0.0, 0.0),
            fraction=self.fraction or 0.0,
            raw_fraction=self.raw_fraction or 0.0,
        )

    @classmethod
    def from_record(cls, record: PartTryRecord) -> "PartTryEntry":
        return cls(**record.model_dump())


class Event(BaseModel):
    """One persisted step of a question attempt."""

    model_config = ConfigDict(validate_assignment=True)

    sequence: int = Field(default=0, ge=0)
    action: Action = Action.SAVE
    response: Response = Field(default_factory=dict)
    state: QuestionState = QuestionState.TODO
    fraction: Optional[float] = None
    summary: Optional[str] = None
    comment: Optional[str] = None
    parts: Dict[str, PartTryEntry] = Field(default_factory=dict)
    # Counters for questions graded as a single whole.
    tries: Optional[int] = None
    raw_fraction: Optional[float] = None

    # ------------------------------------------------------------------
    # Name-based access, compatible with the flat ``_tries_<part>`` bag.

    def get_variable(self, name: str, default: Any = None) -> Any:
        if name in _WHOLE_VARIABLES:
            value = getattr(self, _WHOLE_VARIABLES[name])
            return default if value is None else value
        match = _PART_VARIABLE.match(name)
        if match is None:
            return default
        kind, part_name = match.groups()
        entry = self.parts.get(part_name)
        if entry is None:
            return default
        value = getattr(entry, _PART_FIELDS[kind])
        return default if value is None else value

    def set_variable(self, name: str, value: Any) -> None:
        if name in _WHOLE_VARIABLES:
            setattr(self, _WHOLE_VARIABLES[name], value)
            return
        match = _PART_VARIABLE.match(name)
        if match is None:
            raise KeyError(f"Unknown behaviour variable '{name}'")
        kind, part_name = match.groups()
        entry = self.parts.get(part_name) or PartTryEntry()
        self.parts[part_name] = entry.model_copy(update={_PART_FIELDS[kind]: value})

    def variables(self) -> Dict[str, Any]:
        """Flatten the typed per-part entries into ``_tries_<part>``-style names."""
        flat: Dict[str, Any] = {}
        for name, attribute in _WHOLE_VARIABLES.items():
            value = getattr(self, attribute)
            if value is not None:
                flat[name] = value
        for part_name, entry in self.parts.items():
            for kind, attribute in _PART_FIELDS.items():
                value = getattr(entry, attribute)
                if value is not None:
                    flat[f"_{kind}_{part_name}"] = value
        return flat

    @classmethod
    def from_variables(cls, variables: Mapping[str, Any], **fields: Any) -> "Event":
        """Build an event from a flat variable bag; unknown names are ignored."""
        event = cls(**fields)
        for name, value in variables.items():
            if name in _WHOLE_VARIABLES or _PART_VARIABLE.match(name):
                event.set_variable(name, value)
        return event


class PendingEvent(Event):
    """The event currently being decided; the only one the engine writes to."""

    def record_part(self, part_name: str, record: PartTryRecord) -> None:
        self.parts[part_name] = PartTryEntry.from_record(record)

    def to_event(self) -> Event:
        """Return a plain persisted copy of this event."""
        return Event.model_validate(self.model_dump())


__all__ = [
    "Action",
    "Event",
    "PartScoreResult",
    "PartTryEntry",
    "PartTryRecord",
    "PendingEvent",
    "Response",
    "Verdict",
]
