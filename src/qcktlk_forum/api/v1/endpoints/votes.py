"""Vote-related endpoints for the forum API."""

from fastapi import APIRouter

from qcktlk_forum.api.v1.dependencies import (
    CurrentIdentityDep,
    SessionDep,
    ensure_matches_identity,
)
from qcktlk_forum.schemas.vote import VoteRequest, VoteResponse
from qcktlk_forum.services import posts as post_service
from qcktlk_forum.services.votes import apply_vote, get_user_vote

router = APIRouter(prefix="/posts", tags=["votes"])


@router.post("/{post_id}/vote", response_model=VoteResponse)
async def cast_vote(
    post_id: int,
    vote_data: VoteRequest,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> VoteResponse:
    """Cast, switch or withdraw the caller's vote on a post.

    Sending the same direction twice withdraws the vote; the response always
    carries the post's counters after the change.
    """
    ensure_matches_identity(vote_data.user_id, identity, "userId")
    outcome = apply_vote(db, post_id, identity.email, vote_data.vote_type)
    return VoteResponse(
        post_id=outcome.post_id,
        up_vote=outcome.up_votes,
        down_vote=outcome.down_votes,
        user_vote=outcome.user_vote,
    )


@router.get("/{post_id}/vote", response_model=VoteResponse)
async def get_my_vote(
    post_id: int,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> VoteResponse:
    """Get the post's counters and the caller's current vote."""
    post = post_service.get_live_post(db, post_id)
    return VoteResponse(
        post_id=post.id,
        up_vote=post.up_votes,
        down_vote=post.down_votes,
        user_vote=get_user_vote(db, post_id, identity.email),
    )
