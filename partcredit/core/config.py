"""
Typed configuration for question definitions and replay scenarios.

Everything here is plain data loaded from YAML; the grading engine never
reads files itself, it only receives these validated models.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .modes import BehaviourMode, behaviour_from_env, parse_behaviour_mode
from .validation import ValidationFailure, strict_validation

M = TypeVar("M", bound=BaseModel)


class BehaviourConfig(BaseModel):
    """Which behaviour the quiz prefers for its questions."""

    model_config = ConfigDict(frozen=True)

    preferred_behaviour: BehaviourMode = BehaviourMode.ADAPTIVE

    @field_validator("preferred_behaviour", mode="before")
    @classmethod
    def coerce_mode(cls, value: Any) -> BehaviourMode:
        return parse_behaviour_mode(value)

    @property
    def apply_penalties(self) -> bool:
        return self.preferred_behaviour.applies_penalties

    @classmethod
    def from_env(cls, default: str | BehaviourMode | None = None) -> "BehaviourConfig":
        """Build a config honouring the ``PARTCREDIT_BEHAVIOUR`` override."""
        return cls(preferred_behaviour=behaviour_from_env(default))


class PartDefinition(BaseModel):
    """One independently gradable part of a keyed-answer question."""

    model_config = ConfigDict(extra="forbid")

    weight: float = Field(default=1.0, gt=0.0)
    answers: Dict[str, str] = Field(..., min_length=1, description="Input name to expected answer.")
    numeric_inputs: List[str] = Field(default_factory=list)
    penalty: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Per-try penalty; defaults to the question penalty.")

    @field_validator("answers", mode="before")
    @classmethod
    def stringify_answers(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key).strip(): str(answer).strip() for key, answer in value.items()}
        return value

    @model_validator(mode="after")
    def numeric_inputs_are_known(self) -> "PartDefinition":
        unknown = [name for name in self.numeric_inputs if name not in self.answers]
        if unknown:
            raise ValueError(f"numeric_inputs not declared in answers: {', '.join(unknown)}")
        return self

    @property
    def inputs(self) -> List[str]:
        return list(self.answers)


class QuestionDefinition(BaseModel):
    """A multi-part question whose parts are graded by exact-match inputs."""

    model_config = ConfigDict(extra="forbid")

    name: str = "question"
    text: Optional[str] = None
    penalty: float = Field(default=0.1, ge=0.0, le=1.0)
    parts: Dict[str, PartDefinition] = Field(..., min_length=1)

    @model_validator(mode="after")
    def inputs_unique_across_parts(self) -> "QuestionDefinition":
        seen: Dict[str, str] = {}
        for part_name, part in self.parts.items():
            for input_name in part.inputs:
                if input_name in seen:
                    raise ValueError(
                        f"Input '{input_name}' is used by both '{seen[input_name]}' and '{part_name}'"
                    )
                seen[input_name] = part_name
        return self

    def penalty_for(self, part_name: str) -> float:
        part = self.parts[part_name]
        return self.penalty if part.penalty is None else part.penalty


class ScenarioStep(BaseModel):
    """A single learner action replayed against an attempt."""

    model_config = ConfigDict(extra="forbid")

    action: Literal["save", "submit", "finish", "comment"] = "save"
    response: Dict[str, str] = Field(default_factory=dict)
    comment: Optional[str] = None

    @field_validator("response", mode="before")
    @classmethod
    def stringify_response(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(key): "" if item is None else str(item) for key, item in value.items()}
        return value


class ScenarioConfig(BaseModel):
    """Question, behaviour and learner actions for a replay run."""

    behaviour: BehaviourConfig = Field(default_factory=BehaviourConfig)
    question: QuestionDefinition
    steps: List[ScenarioStep] = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def ensure_sections_present(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        missing = [key for key in ("question", "steps") if key not in values]
        if missing:
            raise ValueError(f"Missing scenario sections: {', '.join(missing)}")
        return values


def read_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return a dictionary."""
    return strict_validation.validate_yaml_file(path).data or {}


def _resolve_config_path(value: Any, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _validated(data: Dict[str, Any], model: Type[M], message: str) -> M:
    try:
        return strict_validation.validate_pydantic_model(data, model).data
    except ValidationFailure as exc:
        raise ValueError(message) from exc


def load_question_definition(path: Path) -> QuestionDefinition:
    """Parse a question YAML into a typed model."""
    return _validated(read_yaml_file(path), QuestionDefinition, f"Invalid question definition in {path}")


def load_scenario(path: Path, *, base_dir: Path | None = None) -> ScenarioConfig:
    """
    Load a replay scenario.

    ``question`` may be an inline mapping or a path to a question YAML,
    resolved relative to ``base_dir`` (default: the scenario's directory).
    """
    path = path.expanduser().resolve()
    data = read_yaml_file(path)
    question = data.get("question")
    if isinstance(question, str):
        question_path = _resolve_config_path(question, (base_dir or path.parent).resolve())
        data["question"] = read_yaml_file(question_path)
    return _validated(data, ScenarioConfig, f"Invalid scenario in {path}")


__all__ = [
    "BehaviourConfig",
    "PartDefinition",
    "QuestionDefinition",
    "ScenarioConfig",
    "ScenarioStep",
    "load_question_definition",
    "load_scenario",
    "read_yaml_file",
]
