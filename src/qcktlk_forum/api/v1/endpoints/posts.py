"""Post-related endpoints for the forum API."""

from typing import Literal

from fastapi import APIRouter, Query, status
from sqlalchemy import desc, func

from qcktlk_forum.api.v1.dependencies import CurrentIdentityDep, SessionDep
from qcktlk_forum.models import Post, PostTag
from qcktlk_forum.models.post import POST_STATUS_DELETED
from qcktlk_forum.schemas.common import CountResponse, MessageResponse
from qcktlk_forum.schemas.post import (
    PostCreate,
    PostCreateResponse,
    PostResponse,
    PostTotalResponse,
)
from qcktlk_forum.services import posts as post_service
from qcktlk_forum.services.quota import count_live_posts, enforce_post_quota
from qcktlk_forum.services.users import get_user_by_email

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=list[PostResponse])
async def list_posts(
    db: SessionDep,
    tag: str | None = Query(None, description="Only posts carrying this tag"),
    author: str | None = Query(None, description="Only posts by this author name"),
    sort: Literal["new", "popular"] = Query("new", description="Newest first or most upvoted"),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of posts to return"),
) -> list[Post]:
    """List live posts, newest first or by upvotes.

    Args:
        db: Database session
        tag: Exact tag name filter
        author: Exact author display name filter
        sort: `new` (creation time) or `popular` (upvotes, then creation time)
        limit: Maximum number of posts to return (max 100)

    Returns:
        List of Post objects
    """
    query = db.query(Post).filter(Post.status != POST_STATUS_DELETED)

    if tag:
        query = query.join(PostTag, PostTag.post_id == Post.id).filter(PostTag.name == tag)

    if author:
        query = query.filter(Post.author_name == author)

    if sort == "popular":
        query = query.order_by(desc(Post.up_votes), desc(Post.created_at), desc(Post.id))
    else:
        query = query.order_by(desc(Post.created_at), desc(Post.id))

    return query.limit(limit).all()


@router.get("/count", response_model=PostTotalResponse)
async def count_posts(db: SessionDep) -> PostTotalResponse:
    """Return the number of live posts on the forum."""
    total = (
        db.query(func.count())
        .select_from(Post)
        .filter(Post.status != POST_STATUS_DELETED)
        .scalar()
        or 0
    )
    return PostTotalResponse(total=int(total))


@router.get("/user/{email}/count", response_model=CountResponse)
async def count_user_posts(email: str, db: SessionDep) -> CountResponse:
    """Return the number of live posts written by `email`."""
    return CountResponse(count=count_live_posts(db, email.strip().lower()))


@router.post("/", response_model=PostCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> PostCreateResponse:
    """Create a post if the author is still within their post quota.

    Args:
        post_data: Title, description, tags and optional display overrides
        identity: Verified author identity
        db: Database session

    Returns:
        The created post with the author's refreshed post count and limit

    Raises:
        QuotaExceededError: If a free member already reached the post limit
    """
    decision = enforce_post_quota(db, identity.email)

    profile = get_user_by_email(db, identity.email)
    author_name = (
        post_data.author_name
        or (profile.display_name if profile else None)
        or identity.name
        or identity.email.split("@", 1)[0]
    )
    author_image = (
        post_data.author_image
        or (profile.photo_url if profile else None)
        or identity.picture
    )

    post = post_service.create_post(
        db,
        author_email=identity.email,
        author_name=author_name,
        author_image=author_image,
        post_data=post_data,
    )

    return PostCreateResponse(
        post=PostResponse.model_validate(post),
        post_count=count_live_posts(db, identity.email),
        limit=decision.limit,
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, db: SessionDep) -> Post:
    """Get a specific live post by ID."""
    return post_service.get_live_post(db, post_id)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> MessageResponse:
    """Delete a post (author only); its comments are removed with it."""
    post_service.delete_post(db, post_id, identity.email)
    return MessageResponse(message="Post deleted successfully")
