# tests/services/test_quota.py
"""Tests for the post quota gate."""

import pytest

from qcktlk_forum.core.errors import InvalidArgumentError, QuotaExceededError
from qcktlk_forum.core.settings import settings
from qcktlk_forum.models.post import POST_STATUS_DELETED
from qcktlk_forum.services.quota import (
    can_create_post,
    count_live_posts,
    enforce_post_quota,
)


def test_unknown_author_is_free_with_no_posts(db_session) -> None:
    decision = can_create_post(db_session, "nobody@example.com")

    assert decision.allowed is True
    assert decision.current_count == 0
    assert decision.limit == settings.free_post_limit
    assert decision.membership == "free"


def test_free_member_one_below_limit_is_allowed(db_session, test_user, post_factory) -> None:
    for _ in range(settings.free_post_limit - 1):
        post_factory(test_user.email)

    decision = can_create_post(db_session, test_user.email)
    assert decision.allowed is True
    assert decision.current_count == settings.free_post_limit - 1


def test_free_member_at_limit_is_denied(db_session, test_user, post_factory) -> None:
    for _ in range(settings.free_post_limit):
        post_factory(test_user.email)

    decision = can_create_post(db_session, test_user.email)
    assert decision.allowed is False
    assert decision.current_count == settings.free_post_limit
    assert decision.limit == settings.free_post_limit

    with pytest.raises(QuotaExceededError) as excinfo:
        enforce_post_quota(db_session, test_user.email)
    assert excinfo.value.current_count == settings.free_post_limit
    assert excinfo.value.limit == settings.free_post_limit
    assert "premium" in excinfo.value.message


def test_deleted_posts_do_not_count(db_session, test_user, post_factory) -> None:
    for _ in range(settings.free_post_limit):
        post_factory(test_user.email, status=POST_STATUS_DELETED)

    assert count_live_posts(db_session, test_user.email) == 0
    assert can_create_post(db_session, test_user.email).allowed is True


def test_premium_member_is_unbounded(db_session, premium_user, post_factory) -> None:
    for _ in range(settings.free_post_limit + 2):
        post_factory(premium_user.email)

    decision = can_create_post(db_session, premium_user.email)
    assert decision.allowed is True
    assert decision.limit is None
    assert decision.unbounded
    assert decision.current_count == settings.free_post_limit + 2


def test_limit_follows_configuration(db_session, test_user, post_factory, monkeypatch) -> None:
    monkeypatch.setattr(settings, "free_post_limit", 1)
    post_factory(test_user.email)

    assert can_create_post(db_session, test_user.email).allowed is False


@pytest.mark.parametrize("author", ["", "   ", "not-an-email", None])
def test_invalid_author_is_rejected(db_session, author) -> None:
    with pytest.raises(InvalidArgumentError):
        can_create_post(db_session, author)
