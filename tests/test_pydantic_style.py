"""Keep the models on the Pydantic v2 API."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import pytest

TARGET_DIRS: tuple[str, ...] = ("partcredit", "tests")
LEGACY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("legacy decorator", re.compile(r"@(?:root_)?validator\b")),
    ("legacy import", re.compile(r"\bfrom\s+pydantic\s+import\b[^\n]*\bvalidator\b")),
    ("legacy config class", re.compile(r"^\s+class Config:", re.MULTILINE)),
    ("legacy parse helper", re.compile(r"\.parse_(?:obj|raw|file)\(")),
)


def _python_files(base_dirs: Iterable[Path]) -> Iterable[Path]:
    for directory in base_dirs:
        if directory.exists():
            yield from directory.rglob("*.py")


def test_models_use_pydantic_v2_api() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    this_file = Path(__file__).resolve()
    offenders: list[str] = []

    for path in _python_files(repo_root / directory for directory in TARGET_DIRS):
        if path == this_file:
            continue
        text = path.read_text(encoding="utf-8")
        labels = [label for label, pattern in LEGACY_PATTERNS if pattern.search(text)]
        if labels:
            offenders.append(f"{path.relative_to(repo_root)} -> {', '.join(labels)}")

    if offenders:
        pytest.fail("Legacy Pydantic usage detected:\n" + "\n".join(offenders))
