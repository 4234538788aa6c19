# tests/v1/test_comments.py
"""Tests for comment endpoints."""

from fastapi import status

from qcktlk_forum.models import CommentReport, Post


def _add_comment(client, post_id, headers, body="Great post"):
    return client.post(f"/api/v1/posts/{post_id}/comments", json={"body": body}, headers=headers)


def test_add_and_list_comments(client, db_session, auth_token, test_post) -> None:
    response = _add_comment(client, test_post.id, auth_token)

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["authorName"] == "Alice"

    comments = client.get(f"/api/v1/posts/{test_post.id}/comments").json()
    assert [comment["body"] for comment in comments] == ["Great post"]

    db_session.expire_all()
    assert db_session.get(Post, test_post.id).comment_count == 1


def test_legacy_comment_field_is_accepted(client, auth_token, test_post) -> None:
    response = client.post(
        f"/api/v1/posts/{test_post.id}/comments",
        json={"comment": "Old client"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["body"] == "Old client"


def test_blank_comment_is_rejected(client, auth_token, test_post) -> None:
    response = _add_comment(client, test_post.id, auth_token, body="   ")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_comment_on_missing_post(client, auth_token) -> None:
    response = _add_comment(client, 99999, auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_comment_author_can_delete(client, db_session, auth_token, test_post) -> None:
    comment_id = _add_comment(client, test_post.id, auth_token).json()["id"]

    response = client.delete(
        f"/api/v1/posts/{test_post.id}/comments/{comment_id}",
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert client.get(f"/api/v1/posts/{test_post.id}/comments").json() == []
    db_session.expire_all()
    assert db_session.get(Post, test_post.id).comment_count == 0


def test_post_author_can_delete(client, auth_token, other_auth_token, test_post) -> None:
    comment_id = _add_comment(client, test_post.id, auth_token).json()["id"]

    response = client.delete(
        f"/api/v1/posts/{test_post.id}/comments/{comment_id}",
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_200_OK


def test_stranger_cannot_delete(client, auth_token, premium_auth_token, test_post) -> None:
    comment_id = _add_comment(client, test_post.id, auth_token).json()["id"]

    response = client.delete(
        f"/api/v1/posts/{test_post.id}/comments/{comment_id}",
        headers=premium_auth_token,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_report_comment(client, db_session, auth_token, other_auth_token, test_post) -> None:
    comment_id = _add_comment(client, test_post.id, auth_token).json()["id"]

    response = client.post(
        f"/api/v1/comments/{comment_id}/report",
        json={"reason": "spam"},
        headers=other_auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    report = db_session.query(CommentReport).one()
    assert report.reporter_email == "bob@example.com"
    assert report.reason == "spam"


def test_report_missing_comment(client, auth_token) -> None:
    response = client.post(
        "/api/v1/comments/99999/report",
        json={"reason": "spam"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
