"""Admin dashboard and user management endpoints (live ADMIN role required)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from designhub.api.deps import require_admin
from designhub.core.database import get_db
from designhub.models import User
from designhub.schemas.admin import AdminStatsResponse, AdminUsersResponse, AdminUserUpdateRequest
from designhub.schemas.auth import UserPublic
from designhub.services import admin_users
from designhub.services.admin_stats import get_admin_stats

router = APIRouter()


@router.get("/stats", response_model=AdminStatsResponse)
def read_stats(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminStatsResponse:
    """Platform totals, users by role, contests by status, newest users and contests."""
    return get_admin_stats(db)


@router.get("/users", response_model=AdminUsersResponse)
def list_users(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    role: str | None = None,
    search: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> AdminUsersResponse:
    return admin_users.list_users(db, role=role, search=search, page=page, limit=limit)


@router.put("/users", response_model=UserPublic)
def update_user(
    body: AdminUserUpdateRequest,
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserPublic:
    """Change a user's role, name or email. Users are never deleted."""
    return admin_users.update_user(db, body)
