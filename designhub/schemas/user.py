"""Request/response schemas for the current user's profile and notifications."""

from datetime import datetime

from pydantic import Field

from designhub.schemas.auth import UserPublic
from designhub.schemas.base import ApiModel


class ProfileCounts(ApiModel):
    contests: int = 0
    proposals: int = 0
    practice_requests: int = 0


class ProfileResponse(UserPublic):
    counts: ProfileCounts = Field(alias="_count")


class ProfileUpdateRequest(ApiModel):
    """Fields explicitly sent (even as null) are written; omitted fields are left alone."""

    name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    portfolio: str | None = None
    phone: str | None = None
    password: str | None = None


class NotificationItem(ApiModel):
    id: int
    type: str
    title: str
    message: str
    link: str | None = None
    read: bool
    created_at: datetime


class NotificationsResponse(ApiModel):
    notifications: list[NotificationItem]
    total: int
    unread_count: int
    page: int
    total_pages: int


class NotificationActionRequest(ApiModel):
    action: str | None = None
    notification_id: int | None = None


class NotificationActionResponse(ApiModel):
    success: bool = True
    updated: int | None = None
    deleted: int | None = None
