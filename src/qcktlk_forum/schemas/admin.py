"""Schemas used by the admin API."""

from typing import Literal

from .common import ApiModel
from .user import UserResponse


class DashboardStats(ApiModel):
    posts: int
    comments: int
    users: int


class StatsResponse(ApiModel):
    stats: DashboardStats


class UserListResponse(ApiModel):
    """A slice of users plus the total number of accounts."""

    users: list[UserResponse]
    total: int


class ReportAction(ApiModel):
    """Decision taken on a reported comment."""

    action: Literal["delete", "dismiss"]
