"""SQLAlchemy models for posts and their tags."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qcktlk_forum.db.session import Base
from qcktlk_forum.db.time import utcnow

POST_STATUS_ACTIVE = "active"
POST_STATUS_DELETED = "deleted"

DEFAULT_AUTHOR_IMAGE = "/default-avatar.png"


class Post(Base):
    """Primary content entity produced by forum members.

    `up_votes` and `down_votes` mirror the rows in `post_vote`; they are only
    ever changed by the vote ledger, inside the same transaction as the rows.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("up_votes >= 0", name="ck_post_up_votes_non_negative"),
        CheckConstraint("down_votes >= 0", name="ck_post_down_votes_non_negative"),
        CheckConstraint("status IN ('active', 'deleted')", name="ck_post_status"),
        Index("ix_post_author_status", "author_email", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Verified identity of the author; display fields are informational only.
    author_email: Mapped[str] = mapped_column(String(320), nullable=False)
    author_name: Mapped[str] = mapped_column(String(200), nullable=False)
    author_image: Mapped[str] = mapped_column(
        String(500), nullable=False, default=DEFAULT_AUTHOR_IMAGE
    )

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=POST_STATUS_ACTIVE)
    up_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    down_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    tag_links: Mapped[list[PostTag]] = relationship(
        "PostTag",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostTag.name",
    )

    @property
    def tags(self) -> list[str]:
        """Return the tag names attached to the post."""
        return [link.name for link in self.tag_links]


class PostTag(Base):
    """Tag name attached to a post."""

    __tablename__ = "post_tag"
    __table_args__ = (Index("ix_post_tag_name", "name"),)

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(64), primary_key=True)

    post: Mapped[Post] = relationship("Post", back_populates="tag_links")
