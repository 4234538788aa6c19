# tests/v1/test_system.py
"""Tests for the system endpoints."""

from qcktlk_forum.core.settings import settings


def test_public_config_hides_secrets(client) -> None:
    body = client.get("/api/v1/system/config").json()

    assert body["posts"]["free_post_limit"] == settings.free_post_limit
    assert settings.secret_key not in str(body)


def test_database_check(client) -> None:
    assert client.get("/api/v1/system/db").json() == {"status": "ok"}
