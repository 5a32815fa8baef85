"""Admin user management: filtered listing with activity counts, and account edits."""

import logging
import math

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from designhub.core.errors import ConflictError, NotFoundError, ValidationError
from designhub.models import Contest, PracticeRequest, Proposal, User
from designhub.schemas.admin import AdminUserItem, AdminUsersResponse, AdminUserUpdateRequest
from designhub.schemas.auth import UserPublic
from designhub.schemas.user import ProfileCounts
from designhub.services.sessions import USER_EXISTS, normalize_role

logger = logging.getLogger(__name__)


def _counts_by_owner(db: Session, owner_column, id_column, user_ids: list[int]) -> dict[int, int]:
    rows = (
        db.query(owner_column, func.count(id_column))
        .filter(owner_column.in_(user_ids))
        .group_by(owner_column)
        .all()
    )
    return dict(rows)


def list_users(
    db: Session,
    *,
    role: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> AdminUsersResponse:
    """Newest-first page of users. role "all" disables the role filter; search matches name or email."""
    query = db.query(User)
    if role and role.lower() != "all":
        query = query.filter(User.role == role.upper())
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    total = query.count()
    users = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    ids = [u.id for u in users]
    contests, proposals, practices = {}, {}, {}
    if ids:
        contests = _counts_by_owner(db, Contest.client_id, Contest.id, ids)
        proposals = _counts_by_owner(db, Proposal.architect_id, Proposal.id, ids)
        practices = _counts_by_owner(db, PracticeRequest.user_id, PracticeRequest.id, ids)

    items = [
        AdminUserItem(
            **UserPublic.model_validate(u).model_dump(),
            counts=ProfileCounts(
                contests=contests.get(u.id, 0),
                proposals=proposals.get(u.id, 0),
                practice_requests=practices.get(u.id, 0),
            ),
        )
        for u in users
    ]
    return AdminUsersResponse(
        users=items, total=total, page=page, total_pages=math.ceil(total / limit)
    )


def update_user(db: Session, body: AdminUserUpdateRequest) -> UserPublic:
    """
    Change another account's role, name or email.

    The role goes through the same check as registration. A new email must not
    belong to another account.
    """
    if body.user_id is None:
        raise ValidationError("User ID required")
    user = db.get(User, body.user_id)
    if user is None:
        raise NotFoundError("User not found")

    if body.role:
        user.role = normalize_role(body.role)
    if body.name:
        user.name = body.name
    if body.email and body.email != user.email:
        taken = db.query(User.id).filter(User.email == body.email).first()
        if taken is not None:
            raise ConflictError(USER_EXISTS)
        user.email = body.email

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(USER_EXISTS, cause=e) from e
    db.refresh(user)
    logger.info("User updated by admin", extra={"user_id": user.id, "role": user.role})
    return UserPublic.model_validate(user)
