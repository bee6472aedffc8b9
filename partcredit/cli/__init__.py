"""Command line entry points."""

from .replay import app, replay_scenario

__all__ = ["app", "replay_scenario"]
