"""Post quota gate for free-tier members.

The gate only reads membership and counts posts; it never writes. The check
and the subsequent insert are not atomic, so two concurrent submissions from
a free author sitting one post below the limit can both pass. That overshoot
is accepted: closing it would need a per-author lock across requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from qcktlk_forum.core.errors import InvalidArgumentError, QuotaExceededError
from qcktlk_forum.core.settings import settings
from qcktlk_forum.models import Post, User
from qcktlk_forum.models.post import POST_STATUS_DELETED
from qcktlk_forum.models.user import MEMBERSHIP_FREE, MEMBERSHIP_PREMIUM

logger = logging.getLogger(__name__)

__all__ = ["QuotaDecision", "can_create_post", "count_live_posts", "enforce_post_quota"]


@dataclass(frozen=True)
class QuotaDecision:
    """Whether an author may post, with the figures the decision was based on."""

    allowed: bool
    current_count: int
    limit: int | None
    membership: str = MEMBERSHIP_FREE

    @property
    def unbounded(self) -> bool:
        return self.limit is None


def _require_author(author_id: str | None) -> str:
    author_id = (author_id or "").strip()
    if not author_id or "@" not in author_id:
        raise InvalidArgumentError("A valid author identity is required", author_id=author_id)
    return author_id


def count_live_posts(db: Session, author_id: str) -> int:
    """Return the number of posts `author_id` has not deleted."""
    return db.execute(
        select(func.count())
        .select_from(Post)
        .where(Post.author_email == author_id, Post.status != POST_STATUS_DELETED)
    ).scalar_one()


def can_create_post(db: Session, author_id: str) -> QuotaDecision:
    """Evaluate the post quota for `author_id`.

    Authors without a membership record are treated as free members. Premium
    members are never limited.

    Raises:
        InvalidArgumentError: If the author identity is empty or malformed.
    """
    author_id = _require_author(author_id)
    membership = db.execute(
        select(User.membership).where(User.email == author_id)
    ).scalar_one_or_none() or MEMBERSHIP_FREE

    current_count = count_live_posts(db, author_id)
    if membership == MEMBERSHIP_PREMIUM:
        return QuotaDecision(
            allowed=True,
            current_count=current_count,
            limit=None,
            membership=membership,
        )

    limit = settings.free_post_limit
    return QuotaDecision(
        allowed=current_count < limit,
        current_count=current_count,
        limit=limit,
        membership=membership,
    )


def enforce_post_quota(db: Session, author_id: str) -> QuotaDecision:
    """Return the quota decision, raising when the author may not post.

    Raises:
        QuotaExceededError: If a free-tier author reached the post limit.
    """
    decision = can_create_post(db, author_id)
    if not decision.allowed:
        limit = decision.limit if decision.limit is not None else 0
        logger.info(
            "Post quota reached for %s (%d/%d)",
            author_id,
            decision.current_count,
            limit,
            extra={"author_id": author_id},
        )
        raise QuotaExceededError(
            f"Free members are limited to {limit} posts. "
            "Upgrade to premium for unlimited posts.",
            current_count=decision.current_count,
            limit=limit,
            author_id=author_id,
        )
    return decision
