"""
Incremental grading engine for multi-part adaptive questions.

The heavy lifting lives in :mod:`partcredit.behaviour`; this module only
exposes version metadata so the package stays cheap to import.
"""

from importlib import metadata


def get_version() -> str:
    """Return the installed project version."""
    try:
        return metadata.version("partcredit")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
