"""User-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import ApiModel


class ProfileUpdateRequest(ApiModel):
    """Schema for updating the caller's profile.

    Membership is deliberately absent: only payment settlement changes it.
    """

    display_name: str | None = Field(None, min_length=1, max_length=200)
    photo_url: str | None = Field(None, max_length=500)


class UserResponse(ApiModel):
    """Profile and membership information returned by the API."""

    id: int
    email: str
    display_name: str
    photo_url: str
    membership: str
    badge: str | None
    role: str
    membership_upgraded_at: datetime | None
    created_at: datetime
    last_login: datetime | None


class RoleUpdate(ApiModel):
    """Schema for changing a user's role."""

    role: Literal["admin", "member"]


class QuotaResponse(ApiModel):
    """Outcome of the post quota gate for the caller."""

    allowed: bool
    post_count: int
    limit: int | None = Field(None, description="Null for members without a post limit")
    membership: str
