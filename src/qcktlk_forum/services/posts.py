"""Service-level helpers for creating, reading and deleting posts."""
from __future__ import annotations

import logging

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from qcktlk_forum.core.errors import ForbiddenError, NotFoundError
from qcktlk_forum.db.time import utcnow
from qcktlk_forum.models import Comment, Post, PostTag
from qcktlk_forum.models.post import (
    DEFAULT_AUTHOR_IMAGE,
    POST_STATUS_ACTIVE,
    POST_STATUS_DELETED,
)
from qcktlk_forum.schemas.post import PostCreate

logger = logging.getLogger(__name__)

__all__ = [
    "create_post",
    "delete_post",
    "get_live_post",
    "popular_tags",
]

POPULAR_TAG_LIMIT = 10


def get_live_post(db: Session, post_id: int) -> Post:
    """Return a post that has not been deleted.

    Raises:
        NotFoundError: If the post does not exist or was deleted.
    """
    post = db.query(Post).filter(Post.id == post_id, Post.status != POST_STATUS_DELETED).first()
    if post is None:
        raise NotFoundError("Post not found", post_id=post_id)
    return post


def create_post(
    db: Session,
    *,
    author_email: str,
    author_name: str,
    author_image: str | None,
    post_data: PostCreate,
) -> Post:
    """Persist a new post with zeroed counters and an empty vote map.

    Quota enforcement happens upstream; see `services.quota`.
    """
    post = Post(
        title=post_data.title.strip(),
        description=post_data.description,
        author_email=author_email,
        author_name=author_name,
        author_image=author_image or DEFAULT_AUTHOR_IMAGE,
        status=POST_STATUS_ACTIVE,
        up_votes=0,
        down_votes=0,
        comment_count=0,
        views=0,
    )
    post.tag_links = [PostTag(name=name) for name in post_data.tags]
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post %s created by %s", post.id, author_email, extra={"post_id": post.id})
    return post


def delete_post(db: Session, post_id: int, actor_email: str) -> Post:
    """Soft-delete a post on behalf of its author and drop its comments.

    Raises:
        NotFoundError: If the post does not exist or was already deleted.
        ForbiddenError: If `actor_email` is not the author.
    """
    post = get_live_post(db, post_id)
    if post.author_email != actor_email:
        raise ForbiddenError(
            "You can only delete your own posts",
            post_id=post_id,
            actor=actor_email,
        )

    db.query(Comment).filter(Comment.post_id == post_id).delete(synchronize_session=False)
    post.status = POST_STATUS_DELETED
    post.comment_count = 0
    post.updated_at = utcnow()
    db.commit()
    logger.info("Post %s deleted by its author", post_id, extra={"post_id": post_id})
    return post


def popular_tags(db: Session, limit: int = POPULAR_TAG_LIMIT) -> list[tuple[str, int]]:
    """Return `(tag, post_count)` pairs for the most used tags on live posts."""
    usage = func.count(PostTag.post_id)
    rows = (
        db.query(PostTag.name, usage)
        .join(Post, Post.id == PostTag.post_id)
        .filter(Post.status != POST_STATUS_DELETED)
        .group_by(PostTag.name)
        .order_by(desc(usage), PostTag.name)
        .limit(limit)
        .all()
    )
    return [(name, int(count)) for name, count in rows]
