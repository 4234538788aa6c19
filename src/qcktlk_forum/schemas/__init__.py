"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .announcement import AnnouncementCreate, AnnouncementResponse, AnnouncementStatusUpdate
from .comment import CommentCreate, CommentReportCreate, CommentResponse, ReportedCommentResponse
from .payment import PaymentIntentCreate, PaymentRecordCreate, PaymentRecordResponse
from .post import PostCreate, PostCreateResponse, PostResponse
from .tag import PopularTag, TagCreate, TagResponse
from .user import ProfileUpdateRequest, QuotaResponse, RoleUpdate, UserResponse
from .vote import VoteRequest, VoteResponse

__all__ = [
    "AnnouncementCreate", "AnnouncementResponse", "AnnouncementStatusUpdate",
    "CommentCreate", "CommentReportCreate", "CommentResponse", "ReportedCommentResponse",
    "PaymentIntentCreate", "PaymentRecordCreate", "PaymentRecordResponse",
    "PostCreate", "PostCreateResponse", "PostResponse",
    "PopularTag", "TagCreate", "TagResponse",
    "ProfileUpdateRequest", "QuotaResponse", "RoleUpdate", "UserResponse",
    "VoteRequest", "VoteResponse",
]
