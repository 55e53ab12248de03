"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class WorkdayError(Exception):
    """Base exception for workday."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(WorkdayError):
    """Resource not found."""

    pass


class ValidationError(WorkdayError):
    """Validation error."""

    pass


class InvalidDateRangeError(ValidationError):
    """Requested date window is empty, reversed or too wide."""

    pass


class InfrastructureError(WorkdayError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class BusinessLogicError(WorkdayError):
    """Business logic constraint violation."""

    pass
