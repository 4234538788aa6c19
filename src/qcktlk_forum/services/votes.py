"""Vote ledger: one vote per identity per post, counters kept in step.

A post's `up_votes`/`down_votes` always equal the number of `post_vote` rows in
each direction. Both sides change in one transaction and the counters move with
SQL-side arithmetic. Each ledger write is guarded by the vote it replaces, so a
concurrent request that changed the same entry first makes this one replay
instead of applying a delta computed from a stale read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session

from qcktlk_forum.core.errors import ConcurrentWriteError, InvalidArgumentError, NotFoundError
from qcktlk_forum.core.settings import settings
from qcktlk_forum.models import Post, PostVote, VoteDirection
from qcktlk_forum.models.post import POST_STATUS_DELETED
from qcktlk_forum.services.transactions import run_in_transaction

logger = logging.getLogger(__name__)

__all__ = [
    "VoteOutcome",
    "VoteTransition",
    "apply_vote",
    "compute_vote_transition",
    "get_user_vote",
]


@dataclass(frozen=True)
class VoteTransition:
    """Counter deltas and resulting ledger entry for a single vote request."""

    up_delta: int
    down_delta: int
    resulting: VoteDirection | None


@dataclass(frozen=True)
class VoteOutcome:
    """Counters and the voter's entry after the ledger update."""

    post_id: int
    up_votes: int
    down_votes: int
    user_vote: VoteDirection | None


def _delta(direction: VoteDirection, amount: int) -> tuple[int, int]:
    if direction is VoteDirection.UP:
        return amount, 0
    return 0, amount


def compute_vote_transition(
    previous: VoteDirection | None,
    direction: VoteDirection,
) -> VoteTransition:
    """Return the effect of voting `direction` over an existing `previous` vote.

    Voting the same way twice withdraws the vote; voting the other way switches it.
    """
    if previous is direction:
        up, down = _delta(direction, -1)
        return VoteTransition(up_delta=up, down_delta=down, resulting=None)

    up, down = _delta(direction, 1)
    if previous is direction.opposite:
        undo_up, undo_down = _delta(previous, -1)
        up += undo_up
        down += undo_down
    return VoteTransition(up_delta=up, down_delta=down, resulting=direction)


def _coerce_direction(direction: VoteDirection | str) -> VoteDirection:
    try:
        return VoteDirection(direction)
    except ValueError as err:
        raise InvalidArgumentError(
            "Invalid vote type",
            direction=str(direction),
        ) from err


def _lock_live_post(db: Session, post_id: int) -> Post:
    # FOR UPDATE serialises voters per post on Postgres. SQLite ignores it, so
    # the guarded ledger writes below catch interleaved voters there.
    post = db.execute(
        select(Post)
        .where(Post.id == post_id, Post.status != POST_STATUS_DELETED)
        .with_for_update()
    ).scalar_one_or_none()
    if post is None:
        raise NotFoundError("Post not found", post_id=post_id)
    return post


def _read_entry(db: Session, post_id: int, voter_id: str) -> VoteDirection | None:
    # Column select, so a stale identity-map copy is never consulted.
    value = db.execute(
        select(PostVote.direction).where(
            PostVote.post_id == post_id,
            PostVote.voter_id == voter_id,
        )
    ).scalar_one_or_none()
    return VoteDirection(value) if value is not None else None


def _write_entry(
    db: Session,
    post_id: int,
    voter_id: str,
    previous: VoteDirection | None,
    resulting: VoteDirection | None,
) -> None:
    """Move the voter's ledger entry from `previous` to `resulting`.

    Updates and deletes only match the entry as it was read. Matching nothing
    means another transaction changed it in between, which raises
    `ConcurrentWriteError` so the caller replays the whole vote. A concurrent
    first vote collides on the primary key instead.
    """
    if previous is None:
        db.execute(
            insert(PostVote).values(
                post_id=post_id,
                voter_id=voter_id,
                direction=resulting.value,
            )
        )
        return

    entry = (
        PostVote.post_id == post_id,
        PostVote.voter_id == voter_id,
        PostVote.direction == previous.value,
    )
    if resulting is None:
        statement = delete(PostVote).where(*entry)
    else:
        statement = update(PostVote).where(*entry).values(direction=resulting.value)
    result = db.execute(statement.execution_options(synchronize_session=False))
    if result.rowcount != 1:
        raise ConcurrentWriteError(
            "Vote changed by a concurrent request",
            post_id=post_id,
            voter=voter_id,
        )


def apply_vote(
    db: Session,
    post_id: int,
    voter_id: str,
    direction: VoteDirection | str,
) -> VoteOutcome:
    """Cast, switch or withdraw `voter_id`'s vote on `post_id` atomically.

    Args:
        db: Database session; the update is committed before returning.
        post_id: Identifier of a live post.
        voter_id: Verified identity of the voter.
        direction: `up` or `down`.

    Returns:
        The post's counters and the voter's resulting vote (None when withdrawn).

    Raises:
        InvalidArgumentError: If the voter is empty or the direction is unknown.
        NotFoundError: If the post does not exist or was deleted.
        StoreConflictError: If the store kept failing after the configured retries.
    """
    voter_id = (voter_id or "").strip()
    if not voter_id:
        raise InvalidArgumentError("Voter identity is required", post_id=post_id)
    direction = _coerce_direction(direction)

    def _apply(session: Session) -> VoteOutcome:
        _lock_live_post(session, post_id)

        previous = _read_entry(session, post_id, voter_id)
        transition = compute_vote_transition(previous, direction)
        _write_entry(session, post_id, voter_id, previous, transition.resulting)

        session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(
                up_votes=Post.up_votes + transition.up_delta,
                down_votes=Post.down_votes + transition.down_delta,
            )
            .execution_options(synchronize_session=False)
        )
        up_votes, down_votes = session.execute(
            select(Post.up_votes, Post.down_votes).where(Post.id == post_id)
        ).one()
        return VoteOutcome(
            post_id=post_id,
            up_votes=up_votes,
            down_votes=down_votes,
            user_vote=transition.resulting,
        )

    outcome = run_in_transaction(
        db,
        _apply,
        attempts=settings.vote_max_retries,
        description=f"vote on post {post_id}",
    )

    # The ORM copy of the post still holds pre-update counters.
    post = db.get(Post, post_id)
    if post is not None:
        db.refresh(post)

    logger.info(
        "Vote applied on post %s: %s -> %s (up=%d, down=%d)",
        post_id,
        direction.value,
        outcome.user_vote.value if outcome.user_vote else "none",
        outcome.up_votes,
        outcome.down_votes,
        extra={"post_id": post_id},
    )
    return outcome


def get_user_vote(db: Session, post_id: int, voter_id: str) -> VoteDirection | None:
    """Return `voter_id`'s current vote on `post_id`, if any."""
    return _read_entry(db, post_id, voter_id)
