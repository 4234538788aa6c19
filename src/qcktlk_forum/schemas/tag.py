"""Tag-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from .common import ApiModel


class TagCreate(ApiModel):
    """Schema for adding a tag to the catalogue."""

    name: str = Field(..., max_length=64)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Tag name is required")
        return value


class TagResponse(ApiModel):
    id: int
    name: str
    created_by: str | None
    created_at: datetime


class PopularTag(ApiModel):
    """Tag name and the number of posts carrying it."""

    name: str
    count: int
