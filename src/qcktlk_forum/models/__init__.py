"""SQLAlchemy models for the QckTlk forum."""

from .announcement import Announcement
from .comment import Comment, CommentReport
from .payment import Payment
from .post import Post, PostTag
from .tag import Tag
from .user import User
from .vote import PostVote, VoteDirection

__all__ = [
    "Announcement",
    "Comment", "CommentReport",
    "Payment",
    "Post", "PostTag",
    "Tag",
    "User",
    "PostVote", "VoteDirection",
]
