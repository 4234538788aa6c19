"""Main entry point for the QckTlk forum API."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from qcktlk_forum.api.errors import register_exception_handlers
from qcktlk_forum.api.v1 import (
    admin_router,
    announcements_router,
    comments_router,
    payments_router,
    posts_router,
    system_router,
    tags_router,
    users_router,
    votes_router,
)
from qcktlk_forum.core.logging import configure_logging
from qcktlk_forum.core.settings import settings
from qcktlk_forum.services.payments import get_payment_client

configure_logging(settings.log_level, settings.log_format)

# Initialize FastAPI app
app = FastAPI(
    title="QckTlk Forum API",
    description="Discussion forum with votes, post quotas and premium membership",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

register_exception_handlers(app)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(tags_router, prefix="/api/v1")
app.include_router(announcements_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(payments_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_payment_client().close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Discussion forum with votes, post quotas and premium membership",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("qcktlk_forum.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
