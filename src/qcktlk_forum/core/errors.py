"""Domain exceptions raised by the forum services.

Every exception carries the HTTP status it maps to and a small dictionary of
identifiers that the API layer logs alongside the failure.
"""

from __future__ import annotations

from typing import Any


class ForumError(RuntimeError):
    """Base exception for failures raised by the service layer."""

    status_code: int = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidArgumentError(ForumError):
    """Raised for malformed identifiers, bad enum values or missing fields."""

    status_code = 400


class NotFoundError(ForumError):
    """Raised when a post, comment, user or announcement does not exist."""

    status_code = 404


class ForbiddenError(ForumError):
    """Raised when the actor lacks the rights for the requested mutation."""

    status_code = 403


class QuotaExceededError(ForbiddenError):
    """Raised when a free-tier author has used up their post allowance."""

    def __init__(self, message: str, *, current_count: int, limit: int, **context: Any) -> None:
        super().__init__(message, current_count=current_count, limit=limit, **context)
        self.current_count = current_count
        self.limit = limit


class StoreConflictError(ForumError):
    """Raised when an atomic store operation keeps failing after retries."""

    status_code = 500


class ConcurrentWriteError(ForumError):
    """Raised when a guarded write finds the row already changed by another transaction.

    `run_in_transaction` treats it as transient and replays the unit.
    """

    status_code = 409
