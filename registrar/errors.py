"""
Error taxonomy for the academic record engine.

ValidationError is raised before any computation proceeds (bad percentages,
malformed requirement sets, forbidden status transitions). NotFoundError is
raised by the services layer when a referenced record does not exist.
Advisory conditions such as a heavy course load are returned as data.
"""
from typing import Any, Optional


class RegistrarError(Exception):
    """Base exception for all registrar errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(RegistrarError, ValueError):
    """Raised when input data violates an engine invariant."""
    pass


class GradeBatchError(ValidationError):
    """Raised when any entry of a grade batch fails validation."""

    def __init__(self, errors: list[str]):
        super().__init__(
            f"Grade batch rejected with {len(errors)} error(s)",
            details={"errors": list(errors)},
        )
        self.errors = list(errors)


class NotFoundError(RegistrarError, LookupError):
    """Raised when a referenced course, section, program or requirement is missing."""
    pass


class PermissionDeniedError(RegistrarError):
    """Raised when the acting user lacks the capability for an operation."""
    pass
