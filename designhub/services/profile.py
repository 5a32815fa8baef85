"""Current user's profile: projection with activity counts, and partial updates."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from designhub.core.security import hash_password
from designhub.models import Contest, PracticeRequest, Proposal, User
from designhub.schemas.auth import UserPublic
from designhub.schemas.user import ProfileCounts, ProfileResponse, ProfileUpdateRequest

# Columns a client may clear by sending null; name and password are only set when non-empty.
NULLABLE_PROFILE_FIELDS = ("avatar_url", "bio", "portfolio", "phone")


def _count(db: Session, column, owner_column, user_id: int) -> int:
    return db.query(func.count(column)).filter(owner_column == user_id).scalar() or 0


def get_profile(db: Session, user: User) -> ProfileResponse:
    counts = ProfileCounts(
        contests=_count(db, Contest.id, Contest.client_id, user.id),
        proposals=_count(db, Proposal.id, Proposal.architect_id, user.id),
        practice_requests=_count(db, PracticeRequest.id, PracticeRequest.user_id, user.id),
    )
    return ProfileResponse(**UserPublic.model_validate(user).model_dump(), counts=counts)


def update_profile(db: Session, user: User, body: ProfileUpdateRequest) -> UserPublic:
    """Apply the fields present in body to user (attached to db) and commit."""
    if body.name:
        user.name = body.name
    for field in NULLABLE_PROFILE_FIELDS:
        if field in body.model_fields_set:
            setattr(user, field, getattr(body, field))
    if body.password:
        user.password_hash = hash_password(body.password)
    db.commit()
    db.refresh(user)
    return UserPublic.model_validate(user)
