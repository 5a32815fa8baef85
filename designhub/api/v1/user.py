"""Current user's profile and notifications."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from designhub.api.deps import get_current_user, get_token_claims
from designhub.core.database import get_db
from designhub.models import User
from designhub.schemas.auth import TokenClaims, UserPublic
from designhub.schemas.user import (
    NotificationActionRequest,
    NotificationActionResponse,
    NotificationsResponse,
    ProfileResponse,
    ProfileUpdateRequest,
)
from designhub.services.notifications import apply_notification_action, list_notifications
from designhub.services.profile import get_profile, update_profile

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
def read_profile(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProfileResponse:
    """Profile of the caller with counts of their contests, proposals and practice requests."""
    return get_profile(db, user)


@router.put("/profile", response_model=UserPublic)
def write_profile(
    body: ProfileUpdateRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserPublic:
    return update_profile(db, user, body)


@router.get("/notifications", response_model=NotificationsResponse)
def read_notifications(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    unread_only: Annotated[bool, Query(alias="unreadOnly")] = False,
) -> NotificationsResponse:
    return list_notifications(
        db, claims.user_id, page=page, limit=limit, unread_only=unread_only
    )


@router.put(
    "/notifications",
    response_model=NotificationActionResponse,
    response_model_exclude_none=True,
)
def update_notifications(
    body: NotificationActionRequest,
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    db: Annotated[Session, Depends(get_db)],
) -> NotificationActionResponse:
    """Actions: mark-read, mark-all-read, delete, delete-all-read."""
    return apply_notification_action(db, claims.user_id, body)
