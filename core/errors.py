"""Exception hierarchy raised while building and synthesizing construct trees."""

from __future__ import annotations


class ArmSynthError(Exception):
    """Base class for all library errors."""


class ValidationError(ArmSynthError):
    """Invalid or missing resource property, raised at construction time."""

    def __init__(
        self,
        message: str,
        *,
        details: str | None = None,
        suggestion: str | None = None,
        property_path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.suggestion = suggestion
        self.property_path = property_path

    def __str__(self) -> str:
        lines = [f"ValidationError: {self.message}"]
        if self.property_path:
            lines.append(f"  Property: {self.property_path}")
        if self.details:
            lines.append(f"  Details: {self.details}")
        if self.suggestion:
            lines.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(lines)


class CircularReferenceError(ArmSynthError):
    pass


class OrphanResourceError(ArmSynthError):
    pass


class ScopeViolationError(ArmSynthError):
    pass


class DependencyCycleError(ArmSynthError):
    pass


class ImmutableResourceError(ArmSynthError):
    """Raised when a configure-once construct is mutated after creation."""


class MissingIdentityError(ArmSynthError):
    """Raised when a grant targets a resource that has no managed identity."""


class SynthesisError(ArmSynthError):
    pass


__all__ = [
    "ArmSynthError",
    "CircularReferenceError",
    "DependencyCycleError",
    "ImmutableResourceError",
    "MissingIdentityError",
    "OrphanResourceError",
    "ScopeViolationError",
    "SynthesisError",
    "ValidationError",
]
