"""Schemas for the admin dashboard and user management."""

from datetime import datetime

from pydantic import Field

from designhub.schemas.auth import UserPublic
from designhub.schemas.base import ApiModel
from designhub.schemas.user import ProfileCounts


class AdminStats(ApiModel):
    total_users: int
    total_contests: int
    total_proposals: int
    total_practices: int
    users_by_role: dict[str, int]
    contests_by_status: dict[str, int]


class RecentUser(ApiModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime


class ContestClientName(ApiModel):
    name: str


class RecentContest(ApiModel):
    id: int
    title: str
    status: str
    budget: float
    created_at: datetime
    client: ContestClientName


class AdminStatsResponse(ApiModel):
    stats: AdminStats
    recent_users: list[RecentUser]
    recent_contests: list[RecentContest]


class AdminUserItem(UserPublic):
    counts: ProfileCounts = Field(alias="_count")


class AdminUsersResponse(ApiModel):
    users: list[AdminUserItem]
    total: int
    page: int
    total_pages: int


class AdminUserUpdateRequest(ApiModel):
    """Admin edit of another account. Empty fields are left unchanged."""

    user_id: int | None = None
    role: str | None = Field(default=None, description="CLIENT, ENGINEER or ADMIN (any case)")
    name: str | None = None
    email: str | None = None
