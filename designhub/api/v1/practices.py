"""Permit-practice requests: submission, engineer claims and the quote-to-completion lifecycle."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from designhub.api.deps import (
    get_current_user,
    get_optional_user,
    get_token_claims,
    require_engineer,
)
from designhub.core.database import get_db
from designhub.models import User
from designhub.schemas.auth import TokenClaims
from designhub.schemas.practice import (
    PracticeActionRequest,
    PracticeRequestCreate,
    PracticeRequestResponse,
    PracticeRequestsListResponse,
    PracticeSummary,
)
from designhub.services import practices as practice_service

router = APIRouter()


@router.get("/requests", response_model=PracticeRequestsListResponse)
def list_my_requests(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    db: Annotated[Session, Depends(get_db)],
) -> PracticeRequestsListResponse:
    """Practice requests submitted by the caller, newest first."""
    return practice_service.list_user_requests(db, claims.user_id)


@router.post(
    "/requests",
    response_model=PracticeRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_request(
    body: PracticeRequestCreate,
    user: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[Session, Depends(get_db)],
) -> PracticeRequestResponse:
    """Anyone may submit; a valid bearer token makes the caller the request's owner."""
    return practice_service.create_request(db, body, user.id if user else None)


@router.post("/{practice_id}/claim", response_model=PracticeRequestResponse)
def claim_request(
    practice_id: int,
    engineer: Annotated[User, Depends(require_engineer)],
    db: Annotated[Session, Depends(get_db)],
) -> PracticeRequestResponse:
    """Assign an unclaimed PENDING_QUOTE request to the calling engineer (or admin)."""
    return practice_service.claim_request(db, practice_id, engineer)


@router.get("/{practice_id}", response_model=None)
def read_request(
    practice_id: int,
    viewer: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[Session, Depends(get_db)],
) -> PracticeRequestResponse | PracticeSummary:
    """
    Full request for its requester, the assigned engineer or an admin;
    id, type, propertyType, location and status for everyone else.
    """
    return practice_service.get_request(db, practice_id, viewer)


@router.put("/{practice_id}", response_model=PracticeRequestResponse)
def update_request(
    practice_id: int,
    body: PracticeActionRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> PracticeRequestResponse:
    """
    Lifecycle step named by **action**:

    - **send-quote** (engineer/admin): quoteAmount > 0, quoteValidDays (default 30), quoteNotes.
    - **accept-quote** / **reject-quote** (requester): only while a quote is pending.
    - **start-work** (engineer/admin): only after the quote was accepted.
    - **update-progress** (engineer/admin): progressPercent clamped to 0-100, progressNotes.
    - **complete** (engineer/admin): sets progress to 100 and the completion time.
    """
    return practice_service.apply_action(db, practice_id, user, body)
