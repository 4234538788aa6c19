"""Announcement-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field, StrictBool

from .common import ApiModel


class AnnouncementCreate(ApiModel):
    """Schema for publishing an announcement."""

    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)


class AnnouncementStatusUpdate(ApiModel):
    """Schema for activating or deactivating an announcement."""

    is_active: StrictBool


class AnnouncementResponse(ApiModel):
    id: int
    title: str
    content: str
    author_name: str
    author_email: str
    author_image: str
    is_active: bool
    created_at: datetime
