"""
Domain Exceptions

Errors raised by the service layer. Each carries the HTTP status the API
maps it to, so route handlers never translate errors by hand.

Author: Khalil Bannouri
Version: 1.0.0
"""

from typing import Optional


class BistroError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict:
        """Convert to the standard error response body."""
        return {
            "success": False,
            "error": self.error,
            "detail": self.message if self.detail is None else f"{self.message}: {self.detail}",
        }


class ValidationError(BistroError):
    """Malformed or out-of-range input."""

    status_code = 400
    error = "Validation Error"


class InvalidStatusTransition(ValidationError):
    """Requested status is recognized but not reachable from the current one."""

    status_code = 409
    error = "Invalid Status Transition"


class NotFoundError(BistroError):
    """A referenced id does not resolve."""

    status_code = 404
    error = "Not Found"


class ConflictError(BistroError):
    """The operation conflicts with existing rows (dependents, duplicates)."""

    status_code = 409
    error = "Conflict"


class StorageError(BistroError):
    """The persistence layer failed; the transaction was rolled back."""

    status_code = 503
    error = "Storage Failure"
