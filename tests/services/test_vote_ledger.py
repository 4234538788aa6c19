# tests/services/test_vote_ledger.py
"""Tests for the vote ledger."""

import threading

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from qcktlk_forum.core.errors import InvalidArgumentError, NotFoundError
from qcktlk_forum.core.settings import settings
from qcktlk_forum.db.session import Base
from qcktlk_forum.models import Post, PostVote, VoteDirection
from qcktlk_forum.models.post import POST_STATUS_DELETED
from qcktlk_forum.services import votes
from qcktlk_forum.services.votes import (
    apply_vote,
    compute_vote_transition,
    get_user_vote,
)

UP = VoteDirection.UP
DOWN = VoteDirection.DOWN


@pytest.mark.parametrize(
    ("previous", "direction", "expected"),
    [
        (None, UP, (1, 0, UP)),
        (None, DOWN, (0, 1, DOWN)),
        (UP, UP, (-1, 0, None)),
        (DOWN, DOWN, (0, -1, None)),
        (UP, DOWN, (-1, 1, DOWN)),
        (DOWN, UP, (1, -1, UP)),
    ],
)
def test_compute_vote_transition(previous, direction, expected) -> None:
    transition = compute_vote_transition(previous, direction)
    assert (transition.up_delta, transition.down_delta, transition.resulting) == expected


def _ledger_counts(db, post_id: int) -> tuple[int, int]:
    rows = dict(
        db.execute(
            select(PostVote.direction, func.count())
            .where(PostVote.post_id == post_id)
            .group_by(PostVote.direction)
        ).all()
    )
    return rows.get("up", 0), rows.get("down", 0)


def test_first_upvote(db_session, test_post) -> None:
    outcome = apply_vote(db_session, test_post.id, "v1@example.com", "up")

    assert (outcome.up_votes, outcome.down_votes) == (1, 0)
    assert outcome.user_vote is UP
    assert get_user_vote(db_session, test_post.id, "v1@example.com") is UP


def test_switch_from_up_to_down(db_session, test_post) -> None:
    apply_vote(db_session, test_post.id, "v1@example.com", UP)
    outcome = apply_vote(db_session, test_post.id, "v1@example.com", DOWN)

    assert (outcome.up_votes, outcome.down_votes) == (0, 1)
    assert outcome.user_vote is DOWN


def test_repeat_vote_withdraws_it(db_session, test_post) -> None:
    apply_vote(db_session, test_post.id, "v1@example.com", DOWN)
    outcome = apply_vote(db_session, test_post.id, "v1@example.com", DOWN)

    assert (outcome.up_votes, outcome.down_votes) == (0, 0)
    assert outcome.user_vote is None
    assert get_user_vote(db_session, test_post.id, "v1@example.com") is None


def test_long_sequence_matches_ledger(db_session, test_post) -> None:
    voter = "v1@example.com"
    expected = [(1, 0), (0, 0), (0, 1), (0, 0), (1, 0)]
    for direction, counters in zip([UP, UP, DOWN, DOWN, UP], expected, strict=True):
        outcome = apply_vote(db_session, test_post.id, voter, direction)
        assert (outcome.up_votes, outcome.down_votes) == counters


def test_counters_match_entries_for_many_voters(db_session, test_post) -> None:
    directions = [UP, UP, DOWN, UP, DOWN, UP, UP]
    for index, direction in enumerate(directions):
        apply_vote(db_session, test_post.id, f"voter{index}@example.com", direction)
    # voter0 withdraws, voter2 switches
    apply_vote(db_session, test_post.id, "voter0@example.com", UP)
    apply_vote(db_session, test_post.id, "voter2@example.com", UP)

    post = db_session.get(Post, test_post.id)
    assert (post.up_votes, post.down_votes) == _ledger_counts(db_session, test_post.id)
    assert (post.up_votes, post.down_votes) == (5, 1)


def test_orm_post_is_refreshed(db_session, test_post) -> None:
    apply_vote(db_session, test_post.id, "v1@example.com", UP)
    assert test_post.up_votes == 1


def test_vote_on_missing_post(db_session) -> None:
    with pytest.raises(NotFoundError):
        apply_vote(db_session, 424242, "v1@example.com", UP)


def test_vote_on_deleted_post(db_session, post_factory, other_user) -> None:
    post = post_factory(other_user.email, status=POST_STATUS_DELETED)
    with pytest.raises(NotFoundError):
        apply_vote(db_session, post.id, "v1@example.com", UP)


def test_vote_requires_voter(db_session, test_post) -> None:
    with pytest.raises(InvalidArgumentError):
        apply_vote(db_session, test_post.id, "  ", UP)


def test_vote_rejects_unknown_direction(db_session, test_post) -> None:
    with pytest.raises(InvalidArgumentError):
        apply_vote(db_session, test_post.id, "v1@example.com", "sideways")

    db_session.refresh(test_post)
    assert (test_post.up_votes, test_post.down_votes) == (0, 0)


def test_stale_read_is_replayed(db_session, test_post, monkeypatch) -> None:
    apply_vote(db_session, test_post.id, "v1@example.com", UP)

    real_read = votes._read_entry
    calls = []

    def _stale_once(db, post_id, voter_id):
        calls.append(voter_id)
        if len(calls) == 1:
            return DOWN
        return real_read(db, post_id, voter_id)

    monkeypatch.setattr(votes, "_read_entry", _stale_once)
    outcome = apply_vote(db_session, test_post.id, "v1@example.com", UP)

    assert len(calls) == 2
    assert outcome.user_vote is None
    assert (outcome.up_votes, outcome.down_votes) == (0, 0)
    assert _ledger_counts(db_session, test_post.id) == (0, 0)


@pytest.fixture()
def file_session_factory(tmp_path):
    """Sessions on a file-backed SQLite database so threads get separate connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'votes.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    finally:
        engine.dispose()


def _seed_post(factory, *ballots: tuple[str, VoteDirection]) -> int:
    with factory() as session:
        post = Post(
            title="Concurrent",
            description="Voted on from two threads",
            author_email="bob@example.com",
            author_name="Bob",
        )
        session.add(post)
        session.commit()
        for voter, direction in ballots:
            apply_vote(session, post.id, voter, direction)
        return post.id


def _vote_in_lockstep(factory, monkeypatch, post_id, ballots) -> None:
    """Run each ballot on its own thread, all reading the ledger before any writes."""
    barrier = threading.Barrier(len(ballots), timeout=10)
    state = threading.local()
    real_transition = votes.compute_vote_transition

    def _gated(previous, direction):
        if not getattr(state, "waited", False):
            state.waited = True
            barrier.wait()
        return real_transition(previous, direction)

    monkeypatch.setattr(votes, "compute_vote_transition", _gated)
    monkeypatch.setattr(settings, "vote_max_retries", 10)

    errors: list[Exception] = []

    def _cast(voter, direction):
        with factory() as session:
            try:
                apply_vote(session, post_id, voter, direction)
            except Exception as exc:
                errors.append(exc)

    threads = [threading.Thread(target=_cast, args=ballot) for ballot in ballots]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert not any(thread.is_alive() for thread in threads)
    assert errors == []


def _counters(factory, post_id: int) -> tuple[int, int]:
    with factory() as session:
        up_votes, down_votes = session.execute(
            select(Post.up_votes, Post.down_votes).where(Post.id == post_id)
        ).one()
    return up_votes, down_votes


def test_concurrent_switches_by_one_voter_keep_ledger(file_session_factory, monkeypatch) -> None:
    factory = file_session_factory
    post_id = _seed_post(
        factory,
        ("o1@example.com", UP),
        ("o2@example.com", UP),
        ("u1@example.com", UP),
    )

    _vote_in_lockstep(
        factory,
        monkeypatch,
        post_id,
        [("u1@example.com", DOWN), ("u1@example.com", DOWN)],
    )

    # One request switches the vote to down, the replayed one withdraws it.
    with factory() as session:
        assert _ledger_counts(session, post_id) == (2, 0)
        assert get_user_vote(session, post_id, "u1@example.com") is None
    assert _counters(factory, post_id) == (2, 0)


def test_concurrent_first_votes_by_one_voter_keep_ledger(file_session_factory, monkeypatch) -> None:
    factory = file_session_factory
    post_id = _seed_post(factory)

    _vote_in_lockstep(
        factory,
        monkeypatch,
        post_id,
        [("u1@example.com", UP), ("u1@example.com", UP)],
    )

    with factory() as session:
        assert _ledger_counts(session, post_id) == (0, 0)
    assert _counters(factory, post_id) == (0, 0)


def test_concurrent_votes_by_different_voters_are_all_counted(
    file_session_factory, monkeypatch
) -> None:
    factory = file_session_factory
    post_id = _seed_post(factory, ("o1@example.com", DOWN))

    _vote_in_lockstep(
        factory,
        monkeypatch,
        post_id,
        [("u1@example.com", UP), ("u2@example.com", DOWN)],
    )

    with factory() as session:
        assert _ledger_counts(session, post_id) == (1, 2)
    assert _counters(factory, post_id) == (1, 2)
