# app/core/errors.py
"""
Domain errors raised by the service layer.

Services never build HTTP responses. They raise one of these and the handler
registered in app.main turns it into the standard error payload:

    {"error": "<CODE>", "message": "<text>", "details": {...}}
"""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class ConflictError(AppError):
    status_code = 400
    error_code = "CONFLICT"
    default_message = "Resource already exists"


class InvalidCredentialsError(AppError):
    """Login rejected. Same response whether the email or the password was wrong."""

    status_code = 400
    error_code = "INVALID_CREDENTIALS"
    default_message = "Unable to login"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Please authenticate"


class NotFoundError(AppError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Not found"


class InvalidTokenError(Exception):
    """Raised by the token verifier. The auth guard collapses it into AuthenticationError."""


class AccountDeletionError(AppError):
    default_message = "Account deletion failed"
