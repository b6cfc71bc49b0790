"""Form validation package."""

from networth.validation.validator import RecordValidator, ValidationError

__all__ = ["RecordValidator", "ValidationError"]
