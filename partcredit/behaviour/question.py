"""Capabilities a question must expose before a behaviour can drive it."""

from __future__ import annotations

from typing import Dict, Mapping, Protocol, Tuple, runtime_checkable

from .events import PartScoreResult, Response
from .states import QuestionState


class IncompatibleQuestionError(TypeError):
    """Raised when a behaviour is attached to a question lacking its capabilities."""

    def __init__(self, question: object, capability: str) -> None:
        self.question = question
        self.capability = capability
        super().__init__(f"{type(question).__name__} does not implement {capability}")


@runtime_checkable
class MultiPartGradable(Protocol):
    """A question whose parts can be graded independently as they are completed."""

    penalty: float

    def grade_parts_that_can_be_graded(
        self,
        response: Response,
        last_graded_responses: Mapping[str, Response],
        final_submit: bool,
    ) -> Dict[str, PartScoreResult]:
        """Grade the parts for which ``response`` counts as a new try.

        ``last_graded_responses`` maps part name to the whole response from
        the last time that part registered a try; parts never tried are
        absent. ``final_submit`` asks for best-effort grading of whatever is
        present because the attempt is ending.
        """
        ...

    def get_parts_and_weights(self) -> Dict[str, float]:
        ...

    def is_any_part_invalid(self, response: Response) -> bool:
        ...

    def summarise_response(self, response: Response) -> str:
        ...


@runtime_checkable
class WholeGradable(Protocol):
    """A question graded as a single unit on every try."""

    penalty: float

    def grade_response(self, response: Response) -> Tuple[float, QuestionState]:
        ...

    def is_complete_response(self, response: Response) -> bool:
        ...

    def is_same_response(self, previous: Response, current: Response) -> bool:
        ...

    def summarise_response(self, response: Response) -> str:
        ...


def is_compatible_question(question: object) -> bool:
    """Return True when ``question`` can be graded part by part."""
    return isinstance(question, MultiPartGradable)


def ensure_multipart(question: object) -> MultiPartGradable:
    if not isinstance(question, MultiPartGradable):
        raise IncompatibleQuestionError(question, "MultiPartGradable")
    return question


def ensure_whole(question: object) -> WholeGradable:
    if not isinstance(question, WholeGradable):
        raise IncompatibleQuestionError(question, "WholeGradable")
    return question


__all__ = [
    "IncompatibleQuestionError",
    "MultiPartGradable",
    "WholeGradable",
    "ensure_multipart",
    "ensure_whole",
    "is_compatible_question",
]
