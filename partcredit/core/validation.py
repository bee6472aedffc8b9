"""Validation helpers so bad YAML or payloads fail loudly instead of grading garbage."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


class ValidationFailure(ValueError):
    """Raised by strict validators when an input cannot be used."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"Validation failed: {'; '.join(self.errors)}")


@dataclass
class ValidationResult:
    """Result of a validation check."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    data: Any = None

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def raise_if_invalid(self) -> None:
        """Raise ValidationFailure if validation failed."""
        if not self.valid:
            raise ValidationFailure(self.errors)


class ValidationFramework:
    """Central validation helpers for configuration and scenario files."""

    def __init__(self, *, strict: bool = True) -> None:
        """Initialize validation framework.

        Args:
            strict: If True, raise ValidationFailure on validation failure
        """
        self.strict = strict
        self.logger = logging.getLogger(__name__)

    def _finish(self, result: ValidationResult, label: str) -> ValidationResult:
        if not result.valid:
            self.logger.error("%s validation failed: %s", label, result.errors)
        elif result.has_warnings:
            self.logger.warning("%s validation warnings: %s", label, result.warnings)

        if self.strict and not result.valid:
            result.raise_if_invalid()
        return result

    # ============== File Operations ==============

    def validate_file_exists(self, path: Path | str) -> ValidationResult:
        """Validate that a file exists and is not empty."""
        errors: List[str] = []
        warnings: List[str] = []
        path_obj = Path(path)

        if not path_obj.exists():
            errors.append(f"File does not exist: {path}")
        elif not path_obj.is_file():
            errors.append(f"Path is not a file: {path}")
        elif not path_obj.stat().st_size:
            warnings.append(f"File is empty: {path}")

        result = ValidationResult(
            valid=not errors,
            errors=errors,
            warnings=warnings,
            data=path_obj if not errors else None,
        )
        return self._finish(result, "File")

    def validate_yaml_file(self, path: Path | str) -> ValidationResult:
        """Validate and load a YAML file whose root is a mapping."""
        file_result = self.validate_file_exists(path)
        if not file_result.valid:
            return file_result

        errors: List[str] = []
        warnings: List[str] = []
        data: Any = None
        try:
            content = Path(path).read_text(encoding="utf-8")
            data = yaml.safe_load(content)
            if data is None:
                warnings.append(f"YAML file contains only null/empty data: {path}")
                data = {}
            elif not isinstance(data, dict):
                errors.append(f"Expected mapping at root of {path}, received {type(data).__name__}")
            else:
                self.logger.debug("Loaded YAML from %s", path)
        except yaml.YAMLError as exc:
            errors.append(f"Invalid YAML in {path}: {exc}")

        result = ValidationResult(valid=not errors, errors=errors, warnings=warnings, data=data)
        return self._finish(result, "YAML")

    # ============== Data Validation ==============

    def validate_pydantic_model(self, data: Dict[str, Any], model_class: Type[M]) -> ValidationResult:
        """Validate data against a Pydantic model."""
        errors: List[str] = []
        validated = None

        try:
            validated = model_class.model_validate(data)
        except ValidationError as exc:
            for error in exc.errors():
                location = ".".join(str(loc) for loc in error["loc"])
                errors.append(f"{location}: {error['msg']}")

        result = ValidationResult(valid=not errors, errors=errors, data=validated)
        return self._finish(result, model_class.__name__)


strict_validation = ValidationFramework(strict=True)


__all__ = [
    "ValidationFailure",
    "ValidationFramework",
    "ValidationResult",
    "strict_validation",
]
