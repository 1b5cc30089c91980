"""Service-layer error taxonomy.

Services raise these; ``safesite.main`` turns them into JSON responses with
the matching HTTP status. ``NotFoundError`` covers both rows that do not
exist and rows owned by someone else, so callers cannot probe for other
users' data.
"""

from __future__ import annotations


class SafeSiteError(RuntimeError):
    """Base error for SafeSite domain operations."""

    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SafeSiteError):
    """Raised when input is malformed or out of range."""

    status_code = 400
    default_message = "Validation failed"


class AuthenticationError(SafeSiteError):
    """Raised when credentials or tokens are missing or invalid."""

    status_code = 401
    default_message = "Authentication required"


class NotFoundError(SafeSiteError):
    """Raised when a resource is absent or not owned by the caller."""

    status_code = 404
    default_message = "Resource not found"


class ConflictError(SafeSiteError):
    """Raised when a uniqueness constraint rejects a write."""

    status_code = 409
    default_message = "Resource already exists"


class InternalError(SafeSiteError):
    """Raised for unexpected failures; the message is never shown to clients."""

    status_code = 500
    default_message = "Internal server error"
