"""
Shared request dependencies: settings, bearer-token authentication and role gates.

Per request the gate moves NoToken -> TokenPresent -> Decoded | Invalid, and for
role-gated routes Decoded -> RoleAuthorized | RoleForbidden. Role checks always
use the role stored on the live user row, not the role embedded in the token.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from designhub.core.config import Settings
from designhub.core.database import get_db
from designhub.core.errors import AuthenticationError, NotFoundError, PermissionDeniedError
from designhub.core.security import decode_access_token, extract_bearer_token
from designhub.models import Role, User
from designhub.schemas.auth import TokenClaims


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_claims(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> TokenClaims:
    """Dependency: require a valid access token and return its claims. Raises 401 otherwise."""
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthenticationError("Authentication required")
    result = decode_access_token(token, settings)
    if not result.valid or result.claims is None:
        raise AuthenticationError("Invalid token")
    return result.claims


def get_optional_claims(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> TokenClaims | None:
    """Dependency: claims when a valid bearer token is sent, else None. Never fails."""
    token = extract_bearer_token(authorization)
    if token is None:
        return None
    result = decode_access_token(token, settings)
    return result.claims if result.valid else None


def get_current_user(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Dependency: re-fetch the caller's user row. Raises 404 if the account is gone."""
    user = db.get(User, claims.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_optional_user(
    claims: Annotated[TokenClaims | None, Depends(get_optional_claims)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    """Dependency: the caller's live user row, or None when anonymous or the account is gone."""
    if claims is None:
        return None
    return db.get(User, claims.user_id)


def require_roles(
    *roles: Role, message: str = "Insufficient permissions"
) -> Callable[..., User]:
    """
    Build a dependency that admits only callers whose live role is in roles.

    Missing user -> 401; role outside the set -> 403 with the given message.
    """
    allowed = frozenset(r.value for r in roles)

    def dependency(
        claims: Annotated[TokenClaims, Depends(get_token_claims)],
        db: Annotated[Session, Depends(get_db)],
    ) -> User:
        user = db.get(User, claims.user_id)
        if user is None:
            raise AuthenticationError("User not found")
        if user.role not in allowed:
            raise PermissionDeniedError(message)
        return user

    return dependency


require_admin = require_roles(Role.ADMIN, message="Admin access required")
require_engineer = require_roles(
    Role.ENGINEER, Role.ADMIN, message="Only engineers can claim practice requests"
)
