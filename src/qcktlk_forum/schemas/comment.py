"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from .common import ApiModel


class CommentCreate(ApiModel):
    """Schema for adding a comment to a post."""

    body: str = Field(
        ...,
        max_length=5000,
        validation_alias=AliasChoices("body", "comment"),
    )
    author_name: str | None = Field(None, max_length=200)
    author_image: str | None = Field(None, max_length=500)

    @field_validator("body")
    @classmethod
    def strip_body(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Comment is required")
        return value


class CommentResponse(ApiModel):
    """Schema for comment information returned by the API."""

    id: int
    post_id: int
    body: str
    author_email: str
    author_name: str
    author_image: str
    created_at: datetime


class CommentReportCreate(ApiModel):
    """Schema for reporting a comment."""

    reason: str = Field(..., min_length=1, max_length=1000)


class CommentReportResponse(ApiModel):
    """A stored report against a comment."""

    id: int
    reporter_email: str
    reason: str
    created_at: datetime


class ReportedCommentResponse(CommentResponse):
    """Comment with the reports waiting for admin review."""

    reports: list[CommentReportResponse]
