"""Models for post comments and the reports filed against them."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qcktlk_forum.db.session import Base
from qcktlk_forum.db.time import utcnow


class Comment(Base):
    """Comment left on a post."""

    __tablename__ = "comment"
    __table_args__ = (Index("ix_comment_post_id", "post_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_email: Mapped[str] = mapped_column(String(320), nullable=False)
    author_name: Mapped[str] = mapped_column(String(200), nullable=False)
    author_image: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    reports: Mapped[list[CommentReport]] = relationship(
        "CommentReport",
        back_populates="comment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CommentReport(Base):
    """A member's complaint about a comment, reviewed by admins."""

    __tablename__ = "comment_report"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    comment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("comment.id", ondelete="CASCADE"),
        nullable=False,
    )
    reporter_email: Mapped[str] = mapped_column(String(320), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    comment: Mapped[Comment] = relationship("Comment", back_populates="reports")
