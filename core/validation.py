"""Reusable property checks and validation result collection."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Sequence

from core.errors import ValidationError

UUID_PATTERN = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")

MIN_MANUAL_THROUGHPUT = 400
MANUAL_THROUGHPUT_STEP = 100
MIN_AUTOSCALE_THROUGHPUT = 1000
AUTOSCALE_THROUGHPUT_STEP = 1000


@dataclass(slots=True)
class ValidationIssue:
    severity: str
    message: str
    path: str | None = None
    code: str | None = None

    def describe(self) -> str:
        prefix = f"[{self.code}] " if self.code else ""
        location = f" ({self.path})" if self.path else ""
        return f"{prefix}{self.message}{location}"


@dataclass(slots=True)
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    infos: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        lines = [issue.describe() for issue in self.errors]
        lines.extend(f"warning: {issue.describe()}" for issue in self.warnings)
        return "\n".join(lines)


class ValidationResultBuilder:
    """Accumulates issues and produces an immutable-by-convention result."""

    def __init__(self) -> None:
        self._errors: List[ValidationIssue] = []
        self._warnings: List[ValidationIssue] = []
        self._infos: List[ValidationIssue] = []

    def add_error(self, message: str, *, path: str | None = None, code: str | None = None) -> "ValidationResultBuilder":
        self._errors.append(ValidationIssue("error", message, path, code))
        return self

    def add_warning(self, message: str, *, path: str | None = None, code: str | None = None) -> "ValidationResultBuilder":
        self._warnings.append(ValidationIssue("warning", message, path, code))
        return self

    def add_info(self, message: str, *, path: str | None = None, code: str | None = None) -> "ValidationResultBuilder":
        self._infos.append(ValidationIssue("info", message, path, code))
        return self

    def merge(self, result: ValidationResult) -> "ValidationResultBuilder":
        self._errors.extend(result.errors)
        self._warnings.extend(result.warnings)
        self._infos.extend(result.infos)
        return self

    def build(self) -> ValidationResult:
        return ValidationResult(errors=list(self._errors), warnings=list(self._warnings), infos=list(self._infos))


def require_non_empty(value: Any, property_path: str, *, suggestion: str | None = None) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(
            f"{property_path} is required",
            details=f"{property_path} cannot be empty",
            suggestion=suggestion or f"Provide a value for {property_path}",
            property_path=property_path,
        )


def validate_length(value: str, property_path: str, minimum: int, maximum: int) -> None:
    if not minimum <= len(value) <= maximum:
        raise ValidationError(
            f"{property_path} must be between {minimum} and {maximum} characters",
            details=f"Got '{value}' with {len(value)} characters",
            suggestion=f"Shorten or lengthen {property_path} to fit the allowed range",
            property_path=property_path,
        )


def validate_pattern(value: str, property_path: str, pattern: re.Pattern[str] | str, *, details: str) -> None:
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    if not compiled.match(value):
        raise ValidationError(
            f"Invalid {property_path}: '{value}'",
            details=details,
            suggestion=f"Use a value matching {compiled.pattern}",
            property_path=property_path,
        )


def validate_choice(value: str, property_path: str, choices: Sequence[str]) -> None:
    if value not in choices:
        raise ValidationError(
            f"Invalid {property_path}: '{value}'",
            details=f"Allowed values: {', '.join(choices)}",
            suggestion=f"Use one of {', '.join(choices)}",
            property_path=property_path,
        )


def is_uuid(value: str | None) -> bool:
    return bool(value) and bool(UUID_PATTERN.match(value or ""))


def validate_manual_throughput(throughput: int, property_path: str = "throughput") -> None:
    """Manual provisioned throughput: at least 400 RU/s, in increments of 100."""
    if throughput < MIN_MANUAL_THROUGHPUT:
        raise ValidationError(
            f"Manual throughput must be at least {MIN_MANUAL_THROUGHPUT} RU/s",
            details=f"Got {throughput} RU/s",
            suggestion=f"Set {property_path} to {MIN_MANUAL_THROUGHPUT} or more",
            property_path=property_path,
        )
    if throughput % MANUAL_THROUGHPUT_STEP:
        raise ValidationError(
            f"Manual throughput must be in increments of {MANUAL_THROUGHPUT_STEP} RU/s",
            details=f"Got {throughput} RU/s",
            suggestion=f"Round {property_path} to the nearest multiple of {MANUAL_THROUGHPUT_STEP}",
            property_path=property_path,
        )


def validate_autoscale_throughput(max_throughput: int, property_path: str = "max_throughput") -> None:
    """Autoscale maximum throughput: at least 1000 RU/s, in increments of 1000."""
    if max_throughput < MIN_AUTOSCALE_THROUGHPUT:
        raise ValidationError(
            f"Autoscale max throughput must be at least {MIN_AUTOSCALE_THROUGHPUT} RU/s",
            details=f"Got {max_throughput} RU/s",
            suggestion=f"Set {property_path} to {MIN_AUTOSCALE_THROUGHPUT} or more",
            property_path=property_path,
        )
    if max_throughput % AUTOSCALE_THROUGHPUT_STEP:
        raise ValidationError(
            f"Autoscale max throughput must be in increments of {AUTOSCALE_THROUGHPUT_STEP} RU/s",
            details=f"Got {max_throughput} RU/s",
            suggestion=f"Round {property_path} to the nearest multiple of {AUTOSCALE_THROUGHPUT_STEP}",
            property_path=property_path,
        )


__all__ = [
    "UUID_PATTERN",
    "ValidationIssue",
    "ValidationResult",
    "ValidationResultBuilder",
    "is_uuid",
    "require_non_empty",
    "validate_autoscale_throughput",
    "validate_choice",
    "validate_length",
    "validate_manual_throughput",
    "validate_pattern",
]
