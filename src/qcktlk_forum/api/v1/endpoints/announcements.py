"""Public announcement endpoints."""

from fastapi import APIRouter
from sqlalchemy import desc

from qcktlk_forum.api.v1.dependencies import SessionDep
from qcktlk_forum.models import Announcement
from qcktlk_forum.schemas.announcement import AnnouncementResponse

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("/", response_model=list[AnnouncementResponse])
async def list_announcements(db: SessionDep) -> list[Announcement]:
    """Return active announcements, newest first."""
    return (
        db.query(Announcement)
        .filter(Announcement.is_active.is_(True))
        .order_by(desc(Announcement.created_at), desc(Announcement.id))
        .all()
    )
