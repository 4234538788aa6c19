"""Translate service-layer exceptions into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from qcktlk_forum.core.errors import ForumError, QuotaExceededError

logger = logging.getLogger(__name__)


async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    """Render a domain error with its mapped status code."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "%s %s failed: %s %s",
            request.method,
            request.url.path,
            exc.message,
            exc.context,
            extra={"path": request.url.path},
            exc_info=exc,
        )
    else:
        logger.info(
            "%s %s rejected (%d): %s %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
            exc.context,
            extra={"path": request.url.path},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def quota_exceeded_handler(request: Request, exc: QuotaExceededError) -> JSONResponse:
    """Render a quota denial with machine-readable limit fields."""
    logger.info(
        "%s %s denied by post quota: %s",
        request.method,
        request.url.path,
        exc.context,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "limitReached": True,
            "postCount": exc.current_count,
            "limit": exc.limit,
        },
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests as 400 Bad Request."""
    logger.info(
        "%s %s rejected: invalid request",
        request.method,
        request.url.path,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the forum's exception handlers to `app`."""
    app.add_exception_handler(QuotaExceededError, quota_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ForumError, forum_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
