"""Application errors and the HTTP status each one maps to.

Every error raised by the services derives from ``AppException``. The
error handler middleware turns it into the standard JSON error body.
Subclasses only set ``status_code`` and ``default_message``.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Additional error context, echoed in the error body.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(AppException):
    """Malformed or unacceptable input."""

    status_code = 400
    default_message = "Validation error"


class InvalidRadiusException(ValidationException):
    """A decrypted search radius that is zero or negative."""

    default_message = "Search radius must be greater than zero"


class DecryptionError(AppException):
    """A ciphertext coordinate or radius that cannot be read.

    Covers malformed tokens, a wrong passphrase, non-numeric plaintext
    and coordinates outside the valid latitude/longitude ranges.
    """

    status_code = 400
    default_message = "Failed to decrypt value"


class UnauthenticatedException(AppException):
    """Missing, invalid or expired bearer credential."""

    status_code = 401
    default_message = "Authentication required"


class ForbiddenException(AppException):
    status_code = 403
    default_message = "Unauthorized: Admin role required"


class NotFoundException(AppException):
    status_code = 404
    default_message = "Resource not found"


class DatabaseException(AppException):
    status_code = 500
    default_message = "Database operation failed"
