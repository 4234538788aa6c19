"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from .common import ApiModel

MAX_TAGS = 10


class PostCreate(ApiModel):
    """Schema for creating a new post.

    The author identity comes from the bearer token; `author_name` and
    `author_image` are display overrides only.
    """

    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1, max_length=20_000)
    tags: list[str] = Field(default_factory=list, description="Tag names or a comma separated string")
    author_name: str | None = Field(None, max_length=200)
    author_image: str | None = Field(None, max_length=500)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value: object) -> object:
        """Accept `"a, b"` as well as `["a", "b"]` and drop blanks and duplicates."""
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            cleaned: list[str] = []
            for item in value:
                if not isinstance(item, str):
                    return value
                name = item.strip()
                if name and name not in cleaned:
                    cleaned.append(name)
            if len(cleaned) > MAX_TAGS:
                raise ValueError(f"A post may carry at most {MAX_TAGS} tags")
            return cleaned
        return value


class PostResponse(ApiModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    description: str
    tags: list[str]
    author_email: str
    author_name: str
    author_image: str
    status: str
    up_votes: int = Field(alias="upVote")
    down_votes: int = Field(alias="downVote")
    comment_count: int
    views: int
    created_at: datetime
    updated_at: datetime


class PostCreateResponse(ApiModel):
    """Created post together with the author's refreshed quota figures."""

    post: PostResponse
    post_count: int
    limit: int | None = Field(None, description="Null for members without a post limit")


class PostTotalResponse(ApiModel):
    """Total number of live posts."""

    total: int
