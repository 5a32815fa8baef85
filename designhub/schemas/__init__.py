"""Pydantic request/response schemas."""

from designhub.schemas.admin import AdminStatsResponse
from designhub.schemas.auth import (
    AccessTokenResponse,
    AuthSession,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenClaims,
    TokenDecodeResult,
    UserPublic,
)
from designhub.schemas.contest import (
    ContestCreateRequest,
    ContestResponse,
    ContestsListResponse,
    ProposalCreateRequest,
    ProposalResponse,
    ProposalsListResponse,
)
from designhub.schemas.health import HealthResponse
from designhub.schemas.practice import (
    PracticeRequestCreate,
    PracticeRequestResponse,
    PracticeRequestsListResponse,
)
from designhub.schemas.upload import FileRecord, UploadResponse
from designhub.schemas.user import ProfileResponse, ProfileUpdateRequest

__all__ = [
    "AccessTokenResponse",
    "AdminStatsResponse",
    "AuthSession",
    "ContestCreateRequest",
    "ContestResponse",
    "ContestsListResponse",
    "FileRecord",
    "HealthResponse",
    "LoginRequest",
    "PracticeRequestCreate",
    "PracticeRequestResponse",
    "PracticeRequestsListResponse",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "ProposalCreateRequest",
    "ProposalResponse",
    "ProposalsListResponse",
    "RefreshRequest",
    "RegisterRequest",
    "TokenClaims",
    "TokenDecodeResult",
    "UploadResponse",
    "UserPublic",
]
