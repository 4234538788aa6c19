"""Administrative endpoints for the forum API.

Every route requires a caller whose account holds the admin role.
"""

import logging

from fastapi import APIRouter, Query, status
from sqlalchemy import desc, func
from sqlalchemy.orm import selectinload

from qcktlk_forum.api.v1.dependencies import AdminDep, SessionDep
from qcktlk_forum.core.errors import InvalidArgumentError, NotFoundError
from qcktlk_forum.models import Announcement, Comment, CommentReport, Post, Tag, User
from qcktlk_forum.models.post import POST_STATUS_DELETED
from qcktlk_forum.schemas.admin import (
    DashboardStats,
    ReportAction,
    StatsResponse,
    UserListResponse,
)
from qcktlk_forum.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementStatusUpdate,
)
from qcktlk_forum.schemas.comment import ReportedCommentResponse
from qcktlk_forum.schemas.common import MessageResponse
from qcktlk_forum.schemas.tag import TagCreate, TagResponse
from qcktlk_forum.schemas.user import RoleUpdate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(admin: AdminDep, db: SessionDep) -> StatsResponse:
    """Return headline counts for the admin dashboard."""
    posts = (
        db.query(func.count())
        .select_from(Post)
        .filter(Post.status != POST_STATUS_DELETED)
        .scalar()
        or 0
    )
    comments = db.query(func.count(Comment.id)).scalar() or 0
    users = db.query(func.count(User.id)).scalar() or 0
    return StatsResponse(
        stats=DashboardStats(posts=int(posts), comments=int(comments), users=int(users))
    )


@router.get("/users", response_model=UserListResponse)
async def list_users(
    admin: AdminDep,
    db: SessionDep,
    skip: int = Query(0, ge=0, description="Number of users to skip"),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of users to return"),
) -> UserListResponse:
    """List accounts, newest first, with the total count for paging."""
    total = db.query(func.count(User.id)).scalar() or 0
    users = (
        db.query(User)
        .order_by(desc(User.created_at), desc(User.id))
        .offset(skip)
        .limit(limit)
        .all()
    )
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        total=int(total),
    )


@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int,
    role_data: RoleUpdate,
    admin: AdminDep,
    db: SessionDep,
) -> User:
    """Grant or revoke the admin role."""
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found", user_id=user_id)

    user.role = role_data.role
    db.commit()
    db.refresh(user)
    logger.info("%s set role of %s to %s", admin.email, user.email, user.role)
    return user


@router.get("/tags", response_model=list[TagResponse])
async def list_tags(admin: AdminDep, db: SessionDep) -> list[Tag]:
    return db.query(Tag).order_by(Tag.name).all()


@router.post("/tags", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def add_tag(tag_data: TagCreate, admin: AdminDep, db: SessionDep) -> Tag:
    """Add a tag to the catalogue; names are unique regardless of case."""
    existing = db.query(Tag).filter(func.lower(Tag.name) == tag_data.name.lower()).first()
    if existing is not None:
        raise InvalidArgumentError("Tag already exists", tag=tag_data.name)

    tag = Tag(name=tag_data.name, created_by=admin.email)
    db.add(tag)
    db.commit()
    db.refresh(tag)
    return tag


@router.get("/reports/comments", response_model=list[ReportedCommentResponse])
async def list_reported_comments(admin: AdminDep, db: SessionDep) -> list[Comment]:
    """List comments with at least one open report, most recent first."""
    return (
        db.query(Comment)
        .join(CommentReport, CommentReport.comment_id == Comment.id)
        .options(selectinload(Comment.reports))
        .distinct()
        .order_by(desc(Comment.created_at), desc(Comment.id))
        .all()
    )


@router.post("/reports/comments/{comment_id}/action", response_model=MessageResponse)
async def act_on_reported_comment(
    comment_id: int,
    action_data: ReportAction,
    admin: AdminDep,
    db: SessionDep,
) -> MessageResponse:
    """Delete a reported comment or dismiss its reports."""
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if comment is None:
        raise NotFoundError("Comment not found", comment_id=comment_id)

    if action_data.action == "delete":
        db.query(Post).filter(Post.id == comment.post_id, Post.comment_count > 0).update(
            {Post.comment_count: Post.comment_count - 1},
            synchronize_session=False,
        )
        db.delete(comment)
        message = "Comment deleted"
    else:
        db.query(CommentReport).filter(CommentReport.comment_id == comment_id).delete(
            synchronize_session=False
        )
        message = "Reports dismissed"

    db.commit()
    logger.info("%s took action %s on comment %s", admin.email, action_data.action, comment_id)
    return MessageResponse(message=message)


@router.get("/announcements", response_model=list[AnnouncementResponse])
async def list_all_announcements(admin: AdminDep, db: SessionDep) -> list[Announcement]:
    """List every announcement, active or not, newest first."""
    return (
        db.query(Announcement)
        .order_by(desc(Announcement.created_at), desc(Announcement.id))
        .all()
    )


@router.post(
    "/announcements",
    response_model=AnnouncementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_announcement(
    announcement_data: AnnouncementCreate,
    admin: AdminDep,
    db: SessionDep,
) -> Announcement:
    announcement = Announcement(
        title=announcement_data.title.strip(),
        content=announcement_data.content.strip(),
        author_name=admin.display_name,
        author_email=admin.email,
        author_image=admin.photo_url,
        is_active=True,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    return announcement


@router.patch("/announcements/{announcement_id}/status", response_model=AnnouncementResponse)
async def set_announcement_status(
    announcement_id: int,
    status_data: AnnouncementStatusUpdate,
    admin: AdminDep,
    db: SessionDep,
) -> Announcement:
    """Activate or deactivate an announcement."""
    announcement = db.query(Announcement).filter(Announcement.id == announcement_id).first()
    if announcement is None:
        raise NotFoundError("Announcement not found", announcement_id=announcement_id)

    announcement.is_active = status_data.is_active
    db.commit()
    db.refresh(announcement)
    return announcement
