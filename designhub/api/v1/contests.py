"""Contests and the proposals submitted against them."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from designhub.api.deps import get_current_user
from designhub.core.database import get_db
from designhub.models import User
from designhub.schemas.contest import (
    ContestCreateRequest,
    ContestResponse,
    ContestsListResponse,
    ContestUpdateRequest,
    DeleteResponse,
    ProposalCreateRequest,
    ProposalResponse,
    ProposalsListResponse,
)
from designhub.services import contests as contest_service

router = APIRouter()


@router.get("", response_model=ContestsListResponse)
def list_contests(
    db: Annotated[Session, Depends(get_db)],
    category: str | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    search: str | None = None,
    min_budget: Annotated[float | None, Query(alias="minBudget")] = None,
    max_budget: Annotated[float | None, Query(alias="maxBudget")] = None,
    featured: bool = False,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> ContestsListResponse:
    """
    Newest-first page of contests. Filters: category ("all" disables it), status,
    free-text search over title/location/description, budget range, featured.
    """
    return contest_service.list_contests(
        db,
        category=category,
        status=status_filter,
        search=search,
        min_budget=min_budget,
        max_budget=max_budget,
        featured=featured,
        page=page,
        limit=limit,
    )


@router.post("", response_model=ContestResponse, status_code=status.HTTP_201_CREATED)
def create_contest(
    body: ContestCreateRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ContestResponse:
    return contest_service.create_contest(db, user.id, body)


@router.get("/{contest_id}", response_model=ContestResponse)
def read_contest(
    contest_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> ContestResponse:
    return contest_service.get_contest(db, contest_id)


@router.put("/{contest_id}", response_model=ContestResponse)
def update_contest(
    contest_id: int,
    body: ContestUpdateRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ContestResponse:
    """Owner-only edit; anyone else gets 403."""
    return contest_service.update_contest(db, contest_id, user.id, body)


@router.delete("/{contest_id}", response_model=DeleteResponse)
def delete_contest(
    contest_id: int,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> DeleteResponse:
    contest_service.delete_contest(db, contest_id, user.id)
    return DeleteResponse()


@router.get("/{contest_id}/proposals", response_model=ProposalsListResponse)
def list_proposals(
    contest_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> ProposalsListResponse:
    return contest_service.list_proposals(db, contest_id)


@router.post(
    "/{contest_id}/proposals",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_proposal(
    contest_id: int,
    body: ProposalCreateRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProposalResponse:
    """
    Submit the caller's proposal. The contest must be OPEN and the caller must not
    have submitted to it already; both cases return 400.
    """
    return contest_service.create_proposal(db, contest_id, user.id, body)
