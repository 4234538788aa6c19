"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .announcements import router as announcements_router
from .comments import router as comments_router
from .payments import router as payments_router
from .posts import router as posts_router
from .system import router as system_router
from .tags import router as tags_router
from .users import router as users_router
from .votes import router as votes_router

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
