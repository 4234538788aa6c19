# tests/v1/test_admin.py
"""Tests for the admin API."""

import pytest
from fastapi import status

from qcktlk_forum.models import Announcement, Comment, CommentReport, Post


@pytest.fixture()
def reported_comment(db_session, test_post, test_user):
    comment = Comment(
        post_id=test_post.id,
        body="buy cheap watches",
        author_email=test_user.email,
        author_name="Alice",
        author_image="/a.png",
    )
    comment.reports = [CommentReport(reporter_email="bob@example.com", reason="spam")]
    db_session.add(comment)
    test_post.comment_count = 1
    db_session.commit()
    db_session.refresh(comment)
    return comment


def test_admin_routes_reject_members(client, auth_token) -> None:
    response = client.get("/api/v1/admin/stats", headers=auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_admin_routes_require_authentication(client) -> None:
    assert client.get("/api/v1/admin/stats").status_code == status.HTTP_401_UNAUTHORIZED


def test_stats(client, admin_auth_token, test_post, reported_comment) -> None:
    body = client.get("/api/v1/admin/stats", headers=admin_auth_token).json()
    # admin, alice and bob
    assert body == {"stats": {"posts": 1, "comments": 1, "users": 3}}


def test_list_users(client, admin_auth_token, test_user, other_user) -> None:
    body = client.get(
        "/api/v1/admin/users",
        params={"limit": 2},
        headers=admin_auth_token,
    ).json()

    assert body["total"] == 3
    assert len(body["users"]) == 2


def test_update_role(client, admin_auth_token, auth_token, test_user) -> None:
    response = client.patch(
        f"/api/v1/admin/users/{test_user.id}/role",
        json={"role": "admin"},
        headers=admin_auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["role"] == "admin"
    assert client.get("/api/v1/admin/stats", headers=auth_token).status_code == status.HTTP_200_OK


def test_update_role_rejects_unknown_role(client, admin_auth_token, test_user) -> None:
    response = client.patch(
        f"/api/v1/admin/users/{test_user.id}/role",
        json={"role": "owner"},
        headers=admin_auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_update_role_for_missing_user(client, admin_auth_token) -> None:
    response = client.patch(
        "/api/v1/admin/users/99999/role",
        json={"role": "member"},
        headers=admin_auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_tags(client, admin_auth_token) -> None:
    response = client.post("/api/v1/admin/tags", json={"name": " python "}, headers=admin_auth_token)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["name"] == "python"
    assert response.json()["createdBy"] == "admin@example.com"

    duplicate = client.post("/api/v1/admin/tags", json={"name": "Python"}, headers=admin_auth_token)
    assert duplicate.status_code == status.HTTP_400_BAD_REQUEST

    assert [tag["name"] for tag in client.get("/api/v1/tags/").json()] == ["python"]
    assert len(client.get("/api/v1/admin/tags", headers=admin_auth_token).json()) == 1


def test_reported_comments_listing(client, admin_auth_token, reported_comment) -> None:
    body = client.get("/api/v1/admin/reports/comments", headers=admin_auth_token).json()

    assert len(body) == 1
    assert body[0]["id"] == reported_comment.id
    assert body[0]["reports"][0]["reason"] == "spam"


def test_delete_reported_comment(client, db_session, admin_auth_token, test_post, reported_comment) -> None:
    response = client.post(
        f"/api/v1/admin/reports/comments/{reported_comment.id}/action",
        json={"action": "delete"},
        headers=admin_auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert db_session.query(Comment).count() == 0
    assert db_session.query(CommentReport).count() == 0
    db_session.expire_all()
    assert db_session.get(Post, test_post.id).comment_count == 0


def test_dismiss_reports(client, db_session, admin_auth_token, reported_comment) -> None:
    response = client.post(
        f"/api/v1/admin/reports/comments/{reported_comment.id}/action",
        json={"action": "dismiss"},
        headers=admin_auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert db_session.query(Comment).count() == 1
    assert db_session.query(CommentReport).count() == 0
    assert client.get("/api/v1/admin/reports/comments", headers=admin_auth_token).json() == []


def test_announcements(client, db_session, admin_auth_token) -> None:
    created = client.post(
        "/api/v1/admin/announcements",
        json={"title": "Maintenance", "content": "Down at noon"},
        headers=admin_auth_token,
    )
    assert created.status_code == status.HTTP_201_CREATED
    announcement_id = created.json()["id"]
    assert [item["title"] for item in client.get("/api/v1/announcements/").json()] == ["Maintenance"]

    response = client.patch(
        f"/api/v1/admin/announcements/{announcement_id}/status",
        json={"isActive": False},
        headers=admin_auth_token,
    )
    assert response.json()["isActive"] is False
    assert client.get("/api/v1/announcements/").json() == []
    assert len(client.get("/api/v1/admin/announcements", headers=admin_auth_token).json()) == 1
    assert db_session.query(Announcement).count() == 1


def test_announcement_status_requires_boolean(client, admin_auth_token) -> None:
    created = client.post(
        "/api/v1/admin/announcements",
        json={"title": "Hi", "content": "Hello"},
        headers=admin_auth_token,
    ).json()
    response = client.patch(
        f"/api/v1/admin/announcements/{created['id']}/status",
        json={"isActive": "yes"},
        headers=admin_auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_missing_announcement(client, admin_auth_token) -> None:
    response = client.patch(
        "/api/v1/admin/announcements/99999/status",
        json={"isActive": True},
        headers=admin_auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
