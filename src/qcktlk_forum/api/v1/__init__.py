"""Version 1 API endpoints."""

from .endpoints import (
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

__all__ = [
    "admin_router",
    "announcements_router",
    "comments_router",
    "payments_router",
    "posts_router",
    "system_router",
    "tags_router",
    "users_router",
    "votes_router",
]
