"""System endpoints exposing public configuration and store health."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from qcktlk_forum.api.v1.dependencies import SessionDep
from qcktlk_forum.core.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "posts": {
            "free_post_limit": settings.free_post_limit,
        },
        "payments": {
            "enabled": settings.payments_enabled,
            "currency": settings.payment_currency,
        },
    }


@router.get("/db")
async def check_database(db: SessionDep) -> dict[str, str]:
    """Verify the database answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from exc
    return {"status": "ok"}
