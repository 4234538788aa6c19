"""Models capturing voting interactions on posts."""

from enum import StrEnum

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from qcktlk_forum.db.session import Base


class VoteDirection(StrEnum):
    """Direction of a single vote."""

    UP = "up"
    DOWN = "down"

    @property
    def opposite(self) -> "VoteDirection":
        """Return the other direction."""
        return VoteDirection.DOWN if self is VoteDirection.UP else VoteDirection.UP


class PostVote(Base):
    """Per-voter entry in a post's vote map."""

    __tablename__ = "post_vote"
    __table_args__ = (
        CheckConstraint("direction IN ('up', 'down')", name="ck_post_vote_direction"),
        Index("ix_post_vote_post_id", "post_id"),
    )

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Composite primary key prevents duplicate votes from the same identity.
    voter_id: Mapped[str] = mapped_column(String(320), primary_key=True)

    direction: Mapped[str] = mapped_column(String(8), nullable=False)
