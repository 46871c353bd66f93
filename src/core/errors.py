"""
src/core/errors.py
===================
Error taxonomy for the Vitrine API.

ApiError subclasses carry the HTTP status and a machine-stable code; the
exception handlers in src/api/main.py turn them into

    {"error": <code>, "message": <text>}

The remaining classes never reach a client directly:
    StorageCorruptionError  caught inside FileStore and repaired
    TokenInvalid            converted to AuthorizationError by the auth dependency
    FatalStartupError       aborts the lifespan, so uvicorn exits non-zero
"""

from __future__ import annotations


class ApiError(Exception):
    """Base class for errors that map to one HTTP status."""

    status_code: int = 500
    code:        str = "internal_error"
    message:     str = "Internal error."

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.message
        self.code    = code or self.code
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    code        = "validation_error"
    message     = "Request is missing required fields."


class AuthenticationError(ApiError):
    """Bad username/password, or wrong old password on rotation."""

    status_code = 401
    code        = "invalid_credentials"
    message     = "Invalid credentials."


class AuthorizationError(ApiError):
    """Missing, malformed, invalid or expired bearer token."""

    status_code = 401
    code        = "token_invalid"
    message     = "Invalid or expired token."


class NotFoundError(ApiError):
    status_code = 404
    code        = "not_found"
    message     = "Not found."


class StorageCorruptionError(Exception):
    """A collection file is missing, empty, or not a JSON array."""


class FatalStartupError(Exception):
    """A collection file could not be created at all."""


class TokenInvalid(Exception):
    """Token signature, shape or expiry check failed."""
