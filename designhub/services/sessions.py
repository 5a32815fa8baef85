"""Session issuance and refresh: login, register and access-token refresh."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from designhub.core.errors import AuthenticationError, ConflictError, ValidationError
from designhub.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    refresh_token_ttl,
    verify_password,
)
from designhub.models import RefreshToken, Role, User
from designhub.models.base import as_utc, utcnow
from designhub.schemas.auth import AuthSession, UserPublic

if TYPE_CHECKING:
    from designhub.core.config import Settings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
USER_EXISTS = "User already exists"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
REFRESH_TOKEN_REVOKED = "Refresh token is invalid or has been revoked"
REFRESH_TOKEN_EXPIRED = "Refresh token expired"


def normalize_role(role: str | None) -> str:
    """Upper-case the requested role and check it against Role; defaults to CLIENT."""
    value = (role or Role.CLIENT.value).strip().upper()
    if value not in Role.__members__:
        raise ValidationError("Invalid role")
    return value


def _issue_session(db: Session, user: User, settings: "Settings") -> AuthSession:
    """
    Mint both tokens and stage the refresh token row. The caller commits.

    The row's expires_at equals the refresh token's exp claim.
    """
    issued_at = utcnow()
    access_token = create_access_token(user, settings, now=issued_at)
    refresh_token = create_refresh_token(user, settings, now=issued_at)
    db.add(
        RefreshToken(
            token=refresh_token,
            user_id=user.id,
            expires_at=issued_at + refresh_token_ttl(settings),
        )
    )
    return AuthSession(
        user=UserPublic.model_validate(user),
        access_token=access_token,
        refresh_token=refresh_token,
    )


def login(db: Session, settings: "Settings", email: str | None, password: str | None) -> AuthSession:
    """
    Authenticate by exact email and password; persist a new refresh token.

    Unknown email and wrong password produce the same error so callers cannot
    discover which accounts exist.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = db.query(User).filter(User.email == email).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login rejected", extra={"reason": "invalid_credentials"})
        raise AuthenticationError(INVALID_CREDENTIALS)

    session = _issue_session(db, user, settings)
    db.commit()
    logger.info("Login succeeded", extra={"user_id": user.id})
    return session


def register(
    db: Session,
    settings: "Settings",
    email: str | None,
    password: str | None,
    name: str | None,
    role: str | None = Role.CLIENT.value,
) -> AuthSession:
    """
    Create an account and sign it in.

    Writes one User row and one RefreshToken row in a single commit. A unique
    violation at commit (concurrent registration of the same email) is reported
    as the same "already exists" error as the pre-check.
    """
    if not email or not password or not name:
        raise ValidationError("Email, password and name are required")
    normalized_role = normalize_role(role)

    if db.query(User.id).filter(User.email == email).first() is not None:
        raise ConflictError(USER_EXISTS)

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=normalized_role,
    )
    try:
        db.add(user)
        db.flush()
        session = _issue_session(db, user, settings)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(USER_EXISTS, cause=e) from e

    logger.info("User registered", extra={"user_id": user.id, "role": normalized_role})
    return session


def refresh(db: Session, settings: "Settings", refresh_token: str | None) -> str:
    """
    Exchange a persisted, unexpired refresh token for a new access token.

    The new token is built from the stored user's current id, email and role,
    so role changes since login take effect. The refresh token itself is not
    rotated. Expired rows are deleted when presented.
    """
    if not refresh_token:
        raise ValidationError("Refresh token is required")

    if not decode_refresh_token(refresh_token, settings).valid:
        logger.info("Refresh rejected", extra={"reason": "undecodable"})
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    stored = (
        db.query(RefreshToken)
        .options(joinedload(RefreshToken.user))
        .filter(RefreshToken.token == refresh_token)
        .first()
    )
    if stored is None:
        logger.info("Refresh rejected", extra={"reason": "not_persisted"})
        raise AuthenticationError(REFRESH_TOKEN_REVOKED)

    if as_utc(stored.expires_at) <= utcnow():
        log_extra = {"user_id": stored.user_id, "refresh_token_id": stored.id}
        db.delete(stored)
        db.commit()
        logger.info("Expired refresh token deleted", extra=log_extra)
        raise AuthenticationError(REFRESH_TOKEN_EXPIRED)

    return create_access_token(stored.user, settings)
