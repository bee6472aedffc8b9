"""Reference question type: each part is a set of inputs with exact expected answers."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Tuple

from partcredit.behaviour.events import PartScoreResult, Response
from partcredit.behaviour.states import QuestionState, graded_state_for_fraction
from partcredit.core.config import PartDefinition, QuestionDefinition, load_question_definition


def normalize_text(value: str | None) -> str:
    """Exact-match normalisation: strip + casefold."""
    return (value or "").strip().casefold()


def _as_number(value: str) -> float | None:
    try:
        return float(value.strip())
    except ValueError:
        return None


class KeyedAnswerQuestion:
    """Multi-part question graded by comparing each input to its expected answer.

    A part counts as a new try once all of its inputs are filled and at least
    one differs from the last graded response for that part. On the final
    submit a part with any filled input is graded.
    """

    def __init__(self, definition: QuestionDefinition) -> None:
        self.definition = definition

    @classmethod
    def from_yaml(cls, path: Path) -> "KeyedAnswerQuestion":
        return cls(load_question_definition(path))

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def penalty(self) -> float:
        return self.definition.penalty

    @property
    def parts(self) -> Dict[str, PartDefinition]:
        return self.definition.parts

    # ------------------------------------------------------------------
    # Per-part helpers

    @staticmethod
    def _filled(response: Mapping[str, str], part: PartDefinition) -> List[str]:
        return [name for name in part.inputs if normalize_text(response.get(name))]

    @staticmethod
    def _invalid_inputs(response: Mapping[str, str], part: PartDefinition) -> List[str]:
        return [
            name
            for name in part.numeric_inputs
            if normalize_text(response.get(name)) and _as_number(response.get(name, "")) is None
        ]

    @staticmethod
    def _changed(response: Mapping[str, str], previous: Mapping[str, str], part: PartDefinition) -> bool:
        return any(normalize_text(response.get(name)) != normalize_text(previous.get(name)) for name in part.inputs)

    @staticmethod
    def _matches(given: str | None, expected: str, numeric: bool) -> bool:
        if numeric:
            given_number = _as_number(given or "")
            expected_number = _as_number(expected)
            if given_number is not None and expected_number is not None:
                return abs(given_number - expected_number) <= 1e-9 * max(1.0, abs(expected_number))
        return normalize_text(given) == normalize_text(expected)

    def score_part(self, response: Mapping[str, str], part_name: str) -> float:
        part = self.parts[part_name]
        hits = sum(
            1
            for name, expected in part.answers.items()
            if self._matches(response.get(name), expected, name in part.numeric_inputs)
        )
        return hits / len(part.answers)

    # ------------------------------------------------------------------
    # Multi-part capability

    def get_parts_and_weights(self) -> Dict[str, float]:
        return {name: part.weight for name, part in self.parts.items()}

    def grade_parts_that_can_be_graded(
        self,
        response: Response,
        last_graded_responses: Mapping[str, Response],
        final_submit: bool,
    ) -> Dict[str, PartScoreResult]:
        results: Dict[str, PartScoreResult] = {}
        for part_name, part in self.parts.items():
            filled = self._filled(response, part)
            if not filled:
                continue
            if not final_submit and len(filled) < len(part.inputs):
                continue
            if self._invalid_inputs(response, part):
                continue
            previous = last_graded_responses.get(part_name)
            if previous is not None and not self._changed(response, previous, part):
                continue
            results[part_name] = PartScoreResult(
                part_name=part_name,
                raw_fraction=self.score_part(response, part_name),
                penalty=self.definition.penalty_for(part_name),
            )
        return results

    def is_any_part_invalid(self, response: Response) -> bool:
        return any(self._invalid_inputs(response, part) for part in self.parts.values())

    def summarise_response(self, response: Response) -> str:
        chunks = []
        for part_name, part in self.parts.items():
            filled = self._filled(response, part)
            if filled:
                values = ", ".join(f"{name}={response[name].strip()}" for name in filled)
                chunks.append(f"{part_name}: {values}")
        return "; ".join(chunks)

    # ------------------------------------------------------------------
    # Whole-question capability

    def is_complete_response(self, response: Response) -> bool:
        return all(
            len(self._filled(response, part)) == len(part.inputs) and not self._invalid_inputs(response, part)
            for part in self.parts.values()
        )

    def is_same_response(self, previous: Response, current: Response) -> bool:
        return not any(self._changed(current, previous, part) for part in self.parts.values())

    def grade_response(self, response: Response) -> Tuple[float, QuestionState]:
        weights = self.get_parts_and_weights()
        total = sum(weight * self.score_part(response, name) for name, weight in weights.items())
        fraction = total / sum(weights.values())
        return fraction, graded_state_for_fraction(fraction)


__all__ = ["KeyedAnswerQuestion", "normalize_text"]
