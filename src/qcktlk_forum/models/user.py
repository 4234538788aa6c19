"""SQLAlchemy model for forum accounts and their membership tier."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from qcktlk_forum.db.session import Base
from qcktlk_forum.db.time import utcnow

MEMBERSHIP_FREE = "free"
MEMBERSHIP_PREMIUM = "premium"

ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"

BADGE_BRONZE = "bronze"
BADGE_GOLD = "gold"

DEFAULT_PHOTO_URL = "/default-avatar.svg"


class User(Base):
    """Profile and membership record keyed by the verified email identity.

    The membership columns are written only by payment settlement.
    """

    __tablename__ = "forum_user"
    __table_args__ = (
        CheckConstraint("membership IN ('free', 'premium')", name="ck_user_membership"),
        CheckConstraint("role IN ('member', 'admin')", name="ck_user_role"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    photo_url: Mapped[str] = mapped_column(String(500), nullable=False, default=DEFAULT_PHOTO_URL)

    membership: Mapped[str] = mapped_column(String(16), nullable=False, default=MEMBERSHIP_FREE)
    membership_upgraded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    badge: Mapped[str | None] = mapped_column(String(32), nullable=True, default=BADGE_BRONZE)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_MEMBER)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_premium(self) -> bool:
        """Return True for paid members."""
        return self.membership == MEMBERSHIP_PREMIUM

    @property
    def is_admin(self) -> bool:
        """Return True for accounts allowed to use the admin API."""
        return self.role == ROLE_ADMIN
