"""Concrete question types that expose the grading capabilities."""

from .keyed import KeyedAnswerQuestion, normalize_text

__all__ = ["KeyedAnswerQuestion", "normalize_text"]
