# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")

from qcktlk_forum.core.settings import settings
from qcktlk_forum.db.session import Base
from qcktlk_forum.db.session import get_db as app_get_session
from qcktlk_forum.main import app as fastapi_app
from qcktlk_forum.models import Post, PostTag, User
from qcktlk_forum.models.user import MEMBERSHIP_PREMIUM, ROLE_ADMIN
from qcktlk_forum.services.identity import create_identity_token

TEST_DB_URL = "sqlite://"

_POST_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit for real, so every test starts from empty tables.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _auth_headers(email: str, name: str | None = None) -> dict[str, str]:
    """Return bearer headers carrying a locally signed identity token."""
    token = create_identity_token(email, name=name, secret_key=settings.secret_key)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers_for() -> Callable[..., dict[str, str]]:
    """Build bearer headers for an arbitrary email."""
    return _auth_headers


def make_user(db: Session, email: str, **overrides) -> User:
    user = User(
        email=email,
        display_name=overrides.pop("display_name", email.split("@", 1)[0]),
        **overrides,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_post(db: Session, author_email: str, *, tags: list[str] | None = None, **overrides) -> Post:
    number = next(_POST_COUNTER)
    post = Post(
        title=overrides.pop("title", f"Post {number}"),
        description=overrides.pop("description", f"Body of post {number}"),
        author_email=author_email,
        author_name=overrides.pop("author_name", author_email.split("@", 1)[0]),
        **overrides,
    )
    post.tag_links = [PostTag(name=name) for name in tags or []]
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


@pytest.fixture()
def post_factory(db_session: Session) -> Callable[..., Post]:
    def _factory(author_email: str, **kwargs) -> Post:
        return make_post(db_session, author_email, **kwargs)

    return _factory


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a free-tier member."""
    return make_user(db_session, "alice@example.com", display_name="Alice")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second free-tier member."""
    return make_user(db_session, "bob@example.com", display_name="Bob")


@pytest.fixture()
def premium_user(db_session: Session) -> User:
    return make_user(
        db_session,
        "carol@example.com",
        display_name="Carol",
        membership=MEMBERSHIP_PREMIUM,
    )


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    return make_user(db_session, "admin@example.com", display_name="Admin", role=ROLE_ADMIN)


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return _auth_headers(test_user.email, test_user.display_name)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return _auth_headers(other_user.email, other_user.display_name)


@pytest.fixture()
def premium_auth_token(premium_user: User) -> dict[str, str]:
    return _auth_headers(premium_user.email, premium_user.display_name)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    return _auth_headers(admin_user.email, admin_user.display_name)


@pytest.fixture()
def test_post(db_session: Session, other_user: User) -> Post:
    """Create a baseline post written by the secondary user."""
    return make_post(db_session, other_user.email, tags=["general"])
