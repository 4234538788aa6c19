"""Helpers for forum accounts and profiles."""
from __future__ import annotations

from sqlalchemy.orm import Session

from qcktlk_forum.db.time import utcnow
from qcktlk_forum.models.user import DEFAULT_PHOTO_URL, User
from qcktlk_forum.schemas.user import ProfileUpdateRequest

__all__ = [
    "default_display_name",
    "get_user_by_email",
    "get_or_create_profile",
    "new_profile",
    "update_profile",
]


def default_display_name(email: str) -> str:
    """Use the local part of the address as a display name."""
    return email.split("@", 1)[0] or email


def get_user_by_email(db: Session, email: str) -> User | None:
    """Return a user by identity."""
    return db.query(User).filter(User.email == email).first()


def new_profile(
    email: str,
    *,
    display_name: str | None = None,
    photo_url: str | None = None,
) -> User:
    """Build (but do not persist) a free-tier profile with default fields."""
    return User(
        email=email,
        display_name=display_name or default_display_name(email),
        photo_url=photo_url or DEFAULT_PHOTO_URL,
        created_at=utcnow(),
        last_login=utcnow(),
    )


def get_or_create_profile(
    db: Session,
    email: str,
    *,
    display_name: str | None = None,
    photo_url: str | None = None,
) -> User:
    """Return the caller's profile, creating a free-tier record on first access."""
    user = get_user_by_email(db, email)
    if user is not None:
        return user

    user = new_profile(email, display_name=display_name, photo_url=photo_url)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_profile(db: Session, user: User, update_data: ProfileUpdateRequest) -> User:
    """Apply partial profile updates; membership fields are never touched."""
    update_dict = update_data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_dict.items():
        setattr(user, key, value)
    user.updated_at = utcnow()

    db.add(user)
    db.commit()
    db.refresh(user)
    return user
