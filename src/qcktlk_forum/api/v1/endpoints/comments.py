"""Comment-related endpoints for the forum API."""

import logging

from fastapi import APIRouter, status

from qcktlk_forum.api.v1.dependencies import CurrentIdentityDep, SessionDep
from qcktlk_forum.core.errors import ForbiddenError, NotFoundError
from qcktlk_forum.models import Comment, CommentReport, Post
from qcktlk_forum.models.user import DEFAULT_PHOTO_URL
from qcktlk_forum.schemas.comment import CommentCreate, CommentReportCreate, CommentResponse
from qcktlk_forum.schemas.common import MessageResponse
from qcktlk_forum.services.posts import get_live_post
from qcktlk_forum.services.users import get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])


def _get_comment_or_404(db: SessionDep, post_id: int, comment_id: int) -> Comment:
    comment = (
        db.query(Comment)
        .filter(Comment.id == comment_id, Comment.post_id == post_id)
        .first()
    )
    if comment is None:
        raise NotFoundError("Comment not found", post_id=post_id, comment_id=comment_id)
    return comment


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(post_id: int, db: SessionDep) -> list[Comment]:
    """List comments on a post, oldest first."""
    get_live_post(db, post_id)
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at, Comment.id)
        .all()
    )


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: int,
    comment_data: CommentCreate,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> Comment:
    """Add a comment to a live post as the authenticated user."""
    post = get_live_post(db, post_id)
    profile = get_user_by_email(db, identity.email)

    comment = Comment(
        post_id=post.id,
        body=comment_data.body,
        author_email=identity.email,
        author_name=(
            comment_data.author_name
            or (profile.display_name if profile else None)
            or identity.name
            or identity.email.split("@", 1)[0]
        ),
        author_image=(
            comment_data.author_image
            or (profile.photo_url if profile else None)
            or identity.picture
            or DEFAULT_PHOTO_URL
        ),
    )
    db.add(comment)
    db.query(Post).filter(Post.id == post.id).update(
        {Post.comment_count: Post.comment_count + 1},
        synchronize_session=False,
    )
    db.commit()
    db.refresh(comment)
    return comment


@router.delete("/posts/{post_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    post_id: int,
    comment_id: int,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> MessageResponse:
    """Delete a comment; allowed for the comment's author and the post's author."""
    post = get_live_post(db, post_id)
    comment = _get_comment_or_404(db, post_id, comment_id)

    if identity.email not in {post.author_email, comment.author_email}:
        raise ForbiddenError(
            "You can only delete comments on your posts or your own comments",
            post_id=post_id,
            comment_id=comment_id,
        )

    db.delete(comment)
    db.query(Post).filter(Post.id == post.id, Post.comment_count > 0).update(
        {Post.comment_count: Post.comment_count - 1},
        synchronize_session=False,
    )
    db.commit()
    return MessageResponse(message="Comment deleted successfully")


@router.post(
    "/comments/{comment_id}/report",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def report_comment(
    comment_id: int,
    report_data: CommentReportCreate,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> MessageResponse:
    """File a report against a comment for admin review."""
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if comment is None:
        raise NotFoundError("Comment not found", comment_id=comment_id)

    db.add(
        CommentReport(
            comment_id=comment.id,
            reporter_email=identity.email,
            reason=report_data.reason.strip(),
        )
    )
    db.commit()
    logger.info("Comment %s reported by %s", comment_id, identity.email)
    return MessageResponse(message="Comment reported successfully")
