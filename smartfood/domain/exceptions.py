"""Domain exceptions for the food-planning core.

Every error carries a stable `error_code` so callers (a UI, a reporting
layer) can branch on it without parsing messages. The core raises these
synchronously at the offending call and never logs or swallows them.
"""
from __future__ import annotations

from typing import Optional


class SmartFoodError(Exception):
    """Base class for all smartfood domain errors."""

    error_code = "smartfood_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class InvalidArgumentError(SmartFoodError, ValueError):
    """Malformed input to a setter or operation (negative amount, empty name...)."""

    error_code = "invalid_argument"


class IncompatibleUnitsError(SmartFoodError, ValueError):
    error_code = "incompatible_units"


class UnknownUnitError(SmartFoodError, ValueError):
    error_code = "unknown_unit"


class NotFoundError(SmartFoodError, KeyError):
    error_code = "not_found"


class DuplicateIdError(SmartFoodError):
    error_code = "duplicate_id"


class ValidationError(SmartFoodError):
    """Structural invariant violation; `field` names the offending field."""

    error_code = "validation_failed"

    def __init__(self, message: str = "", field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def __str__(self) -> str:
        if self.field:
            return f"{self.error_code}: {self.field}: {self.message}"
        return super().__str__()


__all__ = [
    'SmartFoodError', 'InvalidArgumentError', 'IncompatibleUnitsError',
    'UnknownUnitError', 'NotFoundError', 'DuplicateIdError', 'ValidationError',
]
