"""
core/errors.py -- Error taxonomy shared by the auth, catalog and api layers.

Every failure a handler can report is an ApiError subclass carrying its HTTP
status and a machine-readable code. Domain code raises these; api/main.py
registers one exception handler that turns them into the JSON error envelope.
Anything that is not an ApiError is an unexpected failure and becomes a
generic 500 (see the catch-all handler in api/main.py).

Layer rule: core/ is the kernel. No imports from api/, auth/, or catalog/.
"""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """Base class for failures that map onto an HTTP response."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(ApiError):
    """Malformed or missing input. details holds the per-field errors."""

    status_code = 400
    code = "validation_error"
    message = "Validation error"


class InvalidId(ApiError):
    status_code = 400
    code = "invalid_id"
    message = "Canceled, Invalid ID sent"


class Conflict(ApiError):
    status_code = 403
    code = "conflict"
    message = "Email cannot be duplicated"


class NotFound(ApiError):
    status_code = 404
    code = "not_found"
    message = "Not found"


class BadCredential(ApiError):
    status_code = 400
    code = "bad_credentials"
    message = "Password is incorrect"


class Unauthenticated(ApiError):
    """No usable bearer token. Token verification failures use status 400."""

    status_code = 403
    code = "unauthenticated"
    message = "User is not registered"


class Forbidden(ApiError):
    status_code = 403
    code = "forbidden"
    message = "The token is not owned by this user"


class MissingToken(ApiError):
    status_code = 400
    code = "missing_token"
    message = "Token does not exist"


class InvalidToken(ApiError):
    status_code = 400
    code = "invalid_token"
    message = "Token is invalid"


class InternalError(ApiError):
    """Unexpected failure. The catch-all handler answers with this, never with the exception text."""


class UnknownSchema(LookupError):
    """A validator purpose that is not registered. A programming error, not a client fault."""
