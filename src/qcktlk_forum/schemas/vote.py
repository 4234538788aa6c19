"""Vote-related Pydantic schemas."""

from pydantic import Field, field_validator

from qcktlk_forum.models.vote import VoteDirection

from .common import ApiModel

_VOTE_TYPE_ALIASES = {"upvote": "up", "downvote": "down"}


class VoteRequest(ApiModel):
    """Schema for casting or toggling a vote on a post."""

    vote_type: VoteDirection = Field(..., description="'up'/'down' ('upvote'/'downvote' accepted)")
    user_id: str | None = Field(
        None,
        description="Optional; must match the authenticated identity when supplied",
    )

    @field_validator("vote_type", mode="before")
    @classmethod
    def normalise_vote_type(cls, value: object) -> object:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _VOTE_TYPE_ALIASES.get(lowered, lowered)
        return value


class VoteResponse(ApiModel):
    """Counters and the caller's resulting vote after a ledger update."""

    post_id: int
    up_vote: int
    down_vote: int
    user_vote: VoteDirection | None = None
