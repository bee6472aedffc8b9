"""Append-only JSONL log of grading decisions, for auditing replays."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProvenanceEvent(BaseModel):
    """What the state machine decided for one pending event."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    attempt: str = Field(default="attempt", description="Label of the attempt the event belongs to.")
    sequence: int = Field(..., ge=0, description="Position of the pending event in the attempt history.")
    action: str = Field(..., description="Action that was processed, e.g. 'submit' or 'finish'.")
    verdict: str = Field(..., description="'keep' or 'discard'.")
    state: Optional[str] = None
    fraction: Optional[float] = None
    summary: Optional[str] = None
    parts: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class ProvenanceLogger:
    """Append-only JSONL logger; one line per processed action."""

    def __init__(self, output_path: Path):
        self.output_path = output_path
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: ProvenanceEvent | Dict[str, Any]) -> ProvenanceEvent:
        """Write a single decision to disk and return the normalized object."""
        if not isinstance(event, ProvenanceEvent):
            event = ProvenanceEvent.model_validate(event)
        with self.output_path.open("a", encoding="utf-8") as handle:
            handle.write(event.model_dump_json() + "\n")
        return event

    def read(self) -> List[ProvenanceEvent]:
        """Load every decision logged so far, oldest first."""
        if not self.output_path.exists():
            return []
        records: List[ProvenanceEvent] = []
        with self.output_path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    records.append(ProvenanceEvent.model_validate(json.loads(line)))
        return records


__all__ = ["ProvenanceEvent", "ProvenanceLogger"]
