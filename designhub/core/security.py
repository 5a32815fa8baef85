"""Password hashing, signed token encode/decode and bearer header parsing."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol

import bcrypt
import jwt
from pydantic import ValidationError

from designhub.schemas.auth import TokenClaims, TokenDecodeResult

if TYPE_CHECKING:
    from designhub.core.config import Settings

# Bcrypt cost (rounds); fixed so every stored hash has the same work factor.
BCRYPT_ROUNDS = 12

BEARER_PREFIX = "Bearer "

INVALID_TOKEN = TokenDecodeResult(valid=False)


class TokenSubject(Protocol):
    """Anything carrying the identity fields embedded in tokens (e.g. User rows)."""

    id: Any
    email: Any
    role: Any


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors.
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def encode_token(
    claims: dict[str, Any],
    secret: str,
    ttl: timedelta,
    *,
    algorithm: str = "HS256",
    now: datetime | None = None,
) -> str:
    """
    Sign claims into a compact JWT that expires ttl after issuance.

    A random jti makes every token unique, even for identical claims minted
    within the same second.
    """
    issued_at = now or datetime.now(UTC)
    payload: dict[str, Any] = {
        **claims,
        "iat": issued_at,
        "exp": issued_at + ttl,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str,
    *,
    algorithm: str = "HS256",
    verify_exp: bool = True,
) -> TokenDecodeResult:
    """
    Verify signature and expiry; return the embedded claims or the invalid result.

    Never raises: bad signatures, malformed tokens, missing claims and expired
    tokens all yield INVALID_TOKEN. With verify_exp=False the exp claim must
    still be present but is not compared against the clock.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["sub", "exp", "iat"], "verify_exp": verify_exp},
        )
    except jwt.PyJWTError:
        return INVALID_TOKEN
    try:
        claims = TokenClaims(
            user_id=payload["sub"],
            email=payload.get("email", ""),
            role=payload.get("role", ""),
            issued_at=payload["iat"],
            expires_at=payload["exp"],
        )
    except (KeyError, ValidationError):
        return INVALID_TOKEN
    return TokenDecodeResult(valid=True, claims=claims)


def _identity_claims(subject: TokenSubject) -> dict[str, Any]:
    return {"sub": str(subject.id), "email": subject.email, "role": str(subject.role)}


def create_access_token(
    subject: TokenSubject, settings: "Settings", *, now: datetime | None = None
) -> str:
    """Short-lived access token carrying user id, email and role."""
    return encode_token(
        _identity_claims(subject),
        settings.JWT_SECRET.get_secret_value(),
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        algorithm=settings.JWT_ALGORITHM,
        now=now,
    )


def refresh_token_ttl(settings: "Settings") -> timedelta:
    return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)


def create_refresh_token(
    subject: TokenSubject, settings: "Settings", *, now: datetime | None = None
) -> str:
    """Long-lived refresh token, signed with the refresh secret."""
    return encode_token(
        _identity_claims(subject),
        settings.JWT_REFRESH_SECRET.get_secret_value(),
        refresh_token_ttl(settings),
        algorithm=settings.JWT_ALGORITHM,
        now=now,
    )


def decode_access_token(token: str, settings: "Settings") -> TokenDecodeResult:
    return decode_token(
        token, settings.JWT_SECRET.get_secret_value(), algorithm=settings.JWT_ALGORITHM
    )


def decode_refresh_token(token: str, settings: "Settings") -> TokenDecodeResult:
    """
    Check the refresh token's signature and claims only. Its lifetime is decided by
    the persisted RefreshToken row, so a naturally expired session still decodes
    here and is then reported (and deleted) as expired.
    """
    return decode_token(
        token,
        settings.JWT_REFRESH_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        verify_exp=False,
    )


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token after the literal 'Bearer ' prefix, or None for anything else."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):]
    return token or None
