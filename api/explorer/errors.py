"""
Explorer error taxonomy.

Every error carries the HTTP status it maps to and a caller-safe message;
`main.py` renders them as `{"error": message}`.
"""

from __future__ import annotations


class ExplorerError(RuntimeError):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ExplorerError):
    """Caller input is missing or malformed. Raised before any upstream call."""

    status_code = 400
    default_message = "Invalid request"


class RateLimitError(ExplorerError):
    status_code = 403
    default_message = "Rate limit exceeded or access denied"


class NotFoundError(ExplorerError):
    status_code = 404
    default_message = "User not found"


class InvalidQueryError(ExplorerError):
    """GitHub rejected the search query (upstream 422)."""

    status_code = 422
    default_message = "Invalid search query"


class InternalError(ExplorerError):
    status_code = 500
    default_message = "Internal server error"
