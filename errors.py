"""staffdesk exception hierarchy.

Every error carries the HTTP status it maps to; the API renders them in the
standard response envelope.  Import rows never raise these to the caller,
they are folded into the import outcome instead.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base exception for all staffdesk errors."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400


class NotFoundError(AppError):
    """Requested record or file does not exist."""

    status_code = 404


class DuplicateError(AppError):
    """Email already belongs to another employee."""

    status_code = 400

    def __init__(self, email: str, message: str = "Email already exists") -> None:
        super().__init__(message, detail={"email": email})
        self.email = email


class UnconfiguredDependencyError(AppError):
    """An optional collaborator (SMTP) is not configured."""

    status_code = 503


class InternalError(AppError):
    """Unexpected store or transport failure."""

    status_code = 500
