"""Request/response schemas for auth endpoints and decoded token claims."""

from datetime import datetime

from pydantic import BaseModel, Field

from designhub.schemas.base import ApiModel


class TokenClaims(BaseModel):
    """Identity embedded in a verified token. Never persisted."""

    user_id: int
    email: str = ""
    role: str = ""
    issued_at: datetime
    expires_at: datetime


class TokenDecodeResult(BaseModel):
    """Outcome of decoding a token: claims are present only when valid is True."""

    valid: bool
    claims: TokenClaims | None = None


class RegisterRequest(ApiModel):
    """New account; required fields are checked by the service to keep its messages."""

    email: str | None = None
    password: str | None = None
    name: str | None = None
    role: str = Field(default="CLIENT", description="CLIENT, ENGINEER or ADMIN (any case)")


class LoginRequest(ApiModel):
    email: str | None = None
    password: str | None = None


class RefreshRequest(ApiModel):
    refresh_token: str | None = None


class UserPublic(ApiModel):
    """User record without the password hash."""

    id: int
    email: str
    name: str
    role: str
    avatar_url: str | None = None
    bio: str | None = None
    portfolio: str | None = None
    phone: str | None = None
    created_at: datetime


class AuthSession(ApiModel):
    """Returned by login and register."""

    user: UserPublic
    access_token: str = Field(..., description="JWT access token (Authorization: Bearer <token>)")
    refresh_token: str = Field(..., description="Long-lived token for POST /auth/refresh")


class AccessTokenResponse(ApiModel):
    access_token: str
