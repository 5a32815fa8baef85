"""Contests and proposals: listing, creation and proposal submission rules."""

import logging
import math
from datetime import UTC, datetime

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from designhub.core.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from designhub.models import Contest, ContestStatus, NotificationType, Proposal
from designhub.models.base import as_utc
from designhub.schemas.contest import (
    ContestCreateRequest,
    ContestResponse,
    ContestsListResponse,
    ContestUpdateRequest,
    ProposalCreateRequest,
    ProposalResponse,
    ProposalsListResponse,
)
from designhub.services.files import attach_files
from designhub.services.notifications import notify

logger = logging.getLogger(__name__)

DUPLICATE_PROPOSAL = "You have already submitted a proposal for this contest"
PROPOSAL_UNIQUE_MARKERS = (
    "uq_proposals_contest_architect",
    "proposals.contest_id, proposals.architect_id",
)
SECONDS_PER_DAY = 24 * 60 * 60


def days_remaining(deadline: datetime, now: datetime | None = None) -> int:
    """Whole days left until the deadline, rounded up; never negative."""
    now = now or datetime.now(UTC)
    seconds = (as_utc(deadline) - now).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def _to_response(contest: Contest, proposals_count: int) -> ContestResponse:
    return ContestResponse.model_validate(contest).model_copy(
        update={
            "proposals_count": proposals_count,
            "days_remaining": days_remaining(contest.deadline),
        }
    )


def _proposal_counts(db: Session, contest_ids: list[int]) -> dict[int, int]:
    if not contest_ids:
        return {}
    rows = (
        db.query(Proposal.contest_id, func.count(Proposal.id))
        .filter(Proposal.contest_id.in_(contest_ids))
        .group_by(Proposal.contest_id)
        .all()
    )
    return dict(rows)


def _get_contest(db: Session, contest_id: int) -> Contest:
    contest = db.get(Contest, contest_id)
    if contest is None:
        raise NotFoundError("Contest not found")
    return contest


def list_contests(
    db: Session,
    *,
    category: str | None = None,
    status: str | None = None,
    search: str | None = None,
    min_budget: float | None = None,
    max_budget: float | None = None,
    featured: bool = False,
    page: int = 1,
    limit: int = 10,
) -> ContestsListResponse:
    """Filtered, newest-first page of contests with proposal counts and days remaining."""
    query = db.query(Contest)
    if category and category.lower() != "all":
        query = query.filter(Contest.category == category.upper())
    if status:
        query = query.filter(Contest.status == status.upper())
    if featured:
        query = query.filter(Contest.is_featured.is_(True))
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Contest.title.ilike(pattern),
                Contest.location.ilike(pattern),
                Contest.description.ilike(pattern),
            )
        )
    if min_budget is not None:
        query = query.filter(Contest.budget >= min_budget)
    if max_budget is not None:
        query = query.filter(Contest.budget <= max_budget)

    total = query.count()
    contests = (
        query.options(joinedload(Contest.client))
        .order_by(Contest.created_at.desc(), Contest.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    counts = _proposal_counts(db, [c.id for c in contests])
    return ContestsListResponse(
        contests=[_to_response(c, counts.get(c.id, 0)) for c in contests],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )


def get_contest(db: Session, contest_id: int) -> ContestResponse:
    contest = _get_contest(db, contest_id)
    return _to_response(contest, _proposal_counts(db, [contest.id]).get(contest.id, 0))


def create_contest(db: Session, client_id: int, body: ContestCreateRequest) -> ContestResponse:
    if (
        not body.title
        or not body.description
        or not body.location
        or not body.category
        or not body.budget
        or body.deadline is None
    ):
        raise ValidationError("Missing required fields")

    contest = Contest(
        title=body.title,
        description=body.description,
        brief=body.brief,
        location=body.location,
        category=body.category.upper(),
        budget=body.budget,
        deadline=as_utc(body.deadline),
        image_url=body.image_url,
        must_haves=body.must_haves,
        constraints=body.constraints,
        deliverables=body.deliverables,
        client_id=client_id,
    )
    db.add(contest)
    db.commit()
    db.refresh(contest)
    logger.info("Contest created", extra={"contest_id": contest.id, "client_id": client_id})
    return _to_response(contest, 0)


def _get_owned_contest(db: Session, contest_id: int, user_id: int) -> Contest:
    contest = _get_contest(db, contest_id)
    if contest.client_id != user_id:
        raise PermissionDeniedError("Not authorized")
    return contest


def update_contest(
    db: Session, contest_id: int, user_id: int, body: ContestUpdateRequest
) -> ContestResponse:
    """
    Owner edit. Only non-empty fields are written; category and status are
    upper-cased, and the status must be one of the contest statuses.
    """
    contest = _get_owned_contest(db, contest_id, user_id)

    if body.status:
        status = body.status.upper()
        if status not in ContestStatus.__members__:
            raise ValidationError("Invalid status")
        contest.status = status
    if body.category:
        contest.category = body.category.upper()
    if body.deadline is not None:
        contest.deadline = as_utc(body.deadline)
    if body.is_featured is not None:
        contest.is_featured = body.is_featured
    for field in (
        "title",
        "description",
        "brief",
        "location",
        "budget",
        "image_url",
        "must_haves",
        "constraints",
        "deliverables",
    ):
        value = getattr(body, field)
        if value:
            setattr(contest, field, value)

    db.commit()
    db.refresh(contest)
    logger.info("Contest updated", extra={"contest_id": contest.id, "client_id": user_id})
    return get_contest(db, contest.id)


def delete_contest(db: Session, contest_id: int, user_id: int) -> None:
    """Owner delete. Proposals go with the contest; linked files are kept and unlinked."""
    contest = _get_owned_contest(db, contest_id, user_id)
    db.delete(contest)
    db.commit()
    logger.info("Contest deleted", extra={"contest_id": contest_id, "client_id": user_id})


def _load_proposal(db: Session, proposal_id: int) -> Proposal:
    return (
        db.query(Proposal)
        .options(joinedload(Proposal.architect), selectinload(Proposal.files))
        .filter(Proposal.id == proposal_id)
        .one()
    )


def list_proposals(db: Session, contest_id: int) -> ProposalsListResponse:
    _get_contest(db, contest_id)
    proposals = (
        db.query(Proposal)
        .options(joinedload(Proposal.architect), selectinload(Proposal.files))
        .filter(Proposal.contest_id == contest_id)
        .order_by(Proposal.submitted_at.desc(), Proposal.id.desc())
        .all()
    )
    return ProposalsListResponse(
        proposals=[ProposalResponse.model_validate(p) for p in proposals],
        total=len(proposals),
    )


def _is_duplicate_proposal(error: IntegrityError) -> bool:
    # Postgres names the constraint; SQLite lists the columns.
    message = str(error.orig)
    return any(marker in message for marker in PROPOSAL_UNIQUE_MARKERS)


def create_proposal(
    db: Session, contest_id: int, architect_id: int, body: ProposalCreateRequest
) -> ProposalResponse:
    """
    Submit a proposal to an OPEN contest, link the architect's uploaded files and
    notify the contest owner.

    One proposal per architect per contest; a concurrent duplicate that passes the
    pre-check is rejected by the unique constraint with the same error.
    """
    contest = _get_contest(db, contest_id)
    if contest.status != ContestStatus.OPEN.value:
        raise InvalidStateError("Contest is not accepting proposals")

    existing = (
        db.query(Proposal.id)
        .filter(Proposal.contest_id == contest_id, Proposal.architect_id == architect_id)
        .first()
    )
    if existing is not None:
        raise ConflictError(DUPLICATE_PROPOSAL)

    proposal = Proposal(
        contest_id=contest_id,
        architect_id=architect_id,
        description=body.description,
    )
    try:
        db.add(proposal)
        db.flush()
        attach_files(db, body.file_ids, owner_id=architect_id, proposal_id=proposal.id)
        notify(
            db,
            contest.client_id,
            NotificationType.CONTEST_NEW_PROPOSAL,
            "New proposal received",
            f'You received a new proposal for "{contest.title}"',
            link=f"/contest/{contest_id}",
        )
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if not _is_duplicate_proposal(e):
            raise
        raise ConflictError(DUPLICATE_PROPOSAL, cause=e) from e

    logger.info(
        "Proposal submitted",
        extra={"contest_id": contest_id, "proposal_id": proposal.id, "architect_id": architect_id},
    )
    return ProposalResponse.model_validate(_load_proposal(db, proposal.id))
