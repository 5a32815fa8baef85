"""Login, registration and access-token refresh. These routes bypass the bearer gate."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from designhub.api.deps import get_app_settings
from designhub.core.config import Settings
from designhub.core.database import get_db
from designhub.schemas.auth import (
    AccessTokenResponse,
    AuthSession,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
)
from designhub.services import sessions

router = APIRouter()


@router.post("/register", response_model=AuthSession, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthSession:
    """
    Create an account (role CLIENT unless another is given) and return the user
    with an access token and a refresh token.
    """
    return sessions.register(
        db, settings, body.email, body.password, body.name, role=body.role
    )


@router.post("/login", response_model=AuthSession)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthSession:
    """
    Authenticate with email and password; returns the user and a token pair.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    return sessions.login(db, settings, body.email, body.password)


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(
    body: RefreshRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AccessTokenResponse:
    """Exchange a refresh token for a new access token (the refresh token is not rotated)."""
    return AccessTokenResponse(
        access_token=sessions.refresh(db, settings, body.refresh_token)
    )
