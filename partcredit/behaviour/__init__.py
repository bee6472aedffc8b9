"""Adaptive multi-part grading: history replay, per-part scoring and the state machine."""
from .aggregator import Aggregate, aggregate
from .attempt import QuestionAttempt
from .events import Action, Event, PartScoreResult, PartTryRecord, PendingEvent, Verdict
from .history import ReconstructedState, reconstruct
from .processor import SubmissionStateMachine
from .question import IncompatibleQuestionError, MultiPartGradable, WholeGradable, is_compatible_question
from .scoring import GradeDecision, MultiPartScoring, SinglePartScoring
from .states import QuestionState, graded_state_for_fraction
from .updater import apply_part_scores

__all__ = [
    "Action",
    "Aggregate",
    "Event",
    "GradeDecision",
    "IncompatibleQuestionError",
    "MultiPartGradable",
    "MultiPartScoring",
    "PartScoreResult",
    "PartTryRecord",
    "PendingEvent",
    "QuestionAttempt",
    "QuestionState",
    "ReconstructedState",
    "SinglePartScoring",
    "SubmissionStateMachine",
    "Verdict",
    "WholeGradable",
    "aggregate",
    "apply_part_scores",
    "graded_state_for_fraction",
    "is_compatible_question",
    "reconstruct",
]
