"""Retry helper for short read-modify-write transactions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from qcktlk_forum.core.errors import ConcurrentWriteError, StoreConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    OperationalError,
    IntegrityError,
    ConcurrentWriteError,
)


def run_in_transaction(
    db: Session,
    operation: Callable[[Session], T],
    *,
    attempts: int,
    description: str,
) -> T:
    """Run `operation` and commit, retrying the whole unit on transient failures.

    Every failed attempt is rolled back before the next one starts, so callers
    never observe a partially applied unit. Domain errors raised by
    `operation` roll back and propagate immediately.

    Raises:
        StoreConflictError: If every attempt failed with a transient store error.
    """
    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            result = operation(db)
            db.commit()
            return result
        except TRANSIENT_ERRORS as exc:
            db.rollback()
            last_error = exc
            logger.warning(
                "Transient store error during %s (attempt %d/%d): %s",
                description,
                attempt,
                attempts,
                exc.__class__.__name__,
            )
        except Exception:
            db.rollback()
            raise

    raise StoreConflictError(
        f"Could not complete {description} after {attempts} attempts",
        attempts=attempts,
    ) from last_error
