"""
Configuration, logging and validation utilities shared by the grading engine.

Nothing in here knows about question attempts; the behaviour package depends
on these modules, never the other way round.
"""

from .config import BehaviourConfig, QuestionDefinition, ScenarioConfig, load_question_definition, load_scenario
from .modes import BehaviourMode, parse_behaviour_mode
from .provenance import ProvenanceEvent, ProvenanceLogger
from .validation import ValidationFailure, ValidationResult

__all__ = [
    "BehaviourConfig",
    "BehaviourMode",
    "ProvenanceEvent",
    "ProvenanceLogger",
    "QuestionDefinition",
    "ScenarioConfig",
    "ValidationFailure",
    "ValidationResult",
    "load_question_definition",
    "load_scenario",
    "parse_behaviour_mode",
]
