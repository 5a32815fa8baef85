"""Permit-practice requests: submission, listing, claims and the quote-to-completion lifecycle."""

import logging
from collections.abc import Callable
from datetime import timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload, selectinload

from designhub.core.errors import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from designhub.models import NotificationType, PracticeRequest, PracticeStatus, Role, User
from designhub.models.base import utcnow
from designhub.schemas.practice import (
    PracticeActionRequest,
    PracticeRequestCreate,
    PracticeRequestResponse,
    PracticeRequestsListResponse,
    PracticeSummary,
)
from designhub.services.files import attach_files
from designhub.services.notifications import notify

logger = logging.getLogger(__name__)

ALREADY_CLAIMED = "This practice request has already been claimed"
NOT_CLAIMABLE = "This practice request cannot be claimed"
NOT_IN_PROGRESS = "This practice request is not in progress"
QUOTABLE_STATUSES = frozenset(
    {PracticeStatus.PENDING_QUOTE.value, PracticeStatus.QUOTE_SENT.value}
)


def _load(db: Session, practice_id: int) -> PracticeRequest | None:
    return (
        db.query(PracticeRequest)
        .options(
            joinedload(PracticeRequest.user),
            joinedload(PracticeRequest.engineer),
            selectinload(PracticeRequest.files),
        )
        .filter(PracticeRequest.id == practice_id)
        .first()
    )


def list_user_requests(db: Session, user_id: int) -> PracticeRequestsListResponse:
    rows = (
        db.query(PracticeRequest)
        .options(selectinload(PracticeRequest.files))
        .filter(PracticeRequest.user_id == user_id)
        .order_by(PracticeRequest.created_at.desc(), PracticeRequest.id.desc())
        .all()
    )
    return PracticeRequestsListResponse(
        requests=[PracticeRequestResponse.model_validate(r) for r in rows]
    )


def create_request(
    db: Session, body: PracticeRequestCreate, user_id: int | None
) -> PracticeRequestResponse:
    """
    Record a new request. Anonymous submissions are allowed (user_id None);
    only an authenticated requester can link previously uploaded files.
    """
    if (
        not body.type
        or not body.property_type
        or not body.location
        or not body.contact_name
        or not body.contact_email
    ):
        raise ValidationError("Missing required fields")

    practice = PracticeRequest(
        type=body.type.upper(),
        property_type=body.property_type,
        size=body.size,
        location=body.location,
        is_vincolato=body.is_vincolato,
        has_old_permits=body.has_old_permits,
        intervention_details=body.intervention_details,
        contact_name=body.contact_name,
        contact_email=body.contact_email,
        contact_phone=body.contact_phone,
        user_id=user_id,
    )
    db.add(practice)
    db.flush()
    if user_id is not None:
        attach_files(db, body.file_ids, owner_id=user_id, practice_id=practice.id)
    db.commit()
    logger.info(
        "Practice request created",
        extra={"practice_id": practice.id, "practice_type": practice.type, "user_id": user_id},
    )
    return PracticeRequestResponse.model_validate(_load(db, practice.id))


def claim_request(db: Session, practice_id: int, engineer: User) -> PracticeRequestResponse:
    """
    Assign the request to the engineer.

    Only unassigned requests awaiting a quote can be claimed. The assignment is
    a conditional update, so when two engineers race exactly one wins and the
    loser gets "already claimed" without touching the winner's assignment.
    """
    practice = db.get(PracticeRequest, practice_id)
    if practice is None:
        raise NotFoundError("Practice request not found")
    if practice.engineer_id is not None:
        raise InvalidStateError(ALREADY_CLAIMED)
    if practice.status != PracticeStatus.PENDING_QUOTE.value:
        raise InvalidStateError(NOT_CLAIMABLE)

    requester_id = practice.user_id
    practice_type = practice.type
    engineer_id = engineer.id
    engineer_name = engineer.name

    result = db.execute(
        update(PracticeRequest)
        .where(
            PracticeRequest.id == practice_id,
            PracticeRequest.engineer_id.is_(None),
            PracticeRequest.status == PracticeStatus.PENDING_QUOTE.value,
        )
        .values(engineer_id=engineer_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise InvalidStateError(ALREADY_CLAIMED)

    if requester_id is not None:
        notify(
            db,
            requester_id,
            NotificationType.PRACTICE_CLAIMED,
            "Practice request assigned",
            f"{engineer_name} has taken charge of your {practice_type} request",
            link="/dashboard",
        )
    db.commit()
    logger.info(
        "Practice request claimed",
        extra={"practice_id": practice_id, "engineer_id": engineer_id},
    )
    return PracticeRequestResponse.model_validate(_load(db, practice_id))


def _can_view(practice: PracticeRequest, viewer: User | None) -> bool:
    if viewer is None:
        return False
    return (
        practice.user_id == viewer.id
        or practice.engineer_id == viewer.id
        or viewer.role == Role.ADMIN.value
    )


def get_request(
    db: Session, practice_id: int, viewer: User | None
) -> PracticeRequestResponse | PracticeSummary:
    """
    Full request for its requester, its assigned engineer or an admin; everyone
    else, anonymous callers included, gets the public summary.
    """
    practice = _load(db, practice_id)
    if practice is None:
        raise NotFoundError("Practice request not found")
    if _can_view(practice, viewer):
        return PracticeRequestResponse.model_validate(practice)
    return PracticeSummary.model_validate(practice)


def _send_quote(db: Session, practice: PracticeRequest, body: PracticeActionRequest) -> None:
    if practice.status not in QUOTABLE_STATUSES:
        raise InvalidStateError("The quote can no longer be changed")
    if not body.quote_amount or body.quote_amount <= 0:
        raise ValidationError("Invalid quote amount")
    practice.status = PracticeStatus.QUOTE_SENT.value
    practice.quote_amount = body.quote_amount
    practice.quote_valid_until = utcnow() + timedelta(days=body.quote_valid_days)
    practice.quote_notes = (body.quote_notes or "").strip() or None
    if practice.user_id is not None:
        notify(
            db,
            practice.user_id,
            NotificationType.PRACTICE_QUOTE,
            "Quote received",
            f"You received a quote of €{body.quote_amount:.2f} for your {practice.type} request",
            link="/dashboard",
        )


def _accept_quote(db: Session, practice: PracticeRequest, body: PracticeActionRequest) -> None:
    if practice.status != PracticeStatus.QUOTE_SENT.value:
        raise InvalidStateError("There is no quote to accept")
    practice.status = PracticeStatus.ACCEPTED.value
    if practice.engineer_id is not None:
        notify(
            db,
            practice.engineer_id,
            NotificationType.PRACTICE_UPDATE,
            "Quote accepted",
            f"The quote for {practice.type} has been accepted",
            link="/dashboard",
        )


def _reject_quote(db: Session, practice: PracticeRequest, body: PracticeActionRequest) -> None:
    if practice.status != PracticeStatus.QUOTE_SENT.value:
        raise InvalidStateError("There is no quote to reject")
    # Back to the pool: any engineer may claim it again.
    practice.status = PracticeStatus.PENDING_QUOTE.value
    practice.quote_amount = None
    practice.quote_valid_until = None
    practice.quote_notes = None
    practice.engineer_id = None


def _start_work(db: Session, practice: PracticeRequest, body: PracticeActionRequest) -> None:
    if practice.status != PracticeStatus.ACCEPTED.value:
        raise InvalidStateError("The quote must be accepted first")
    practice.status = PracticeStatus.IN_PROGRESS.value
    if practice.user_id is not None:
        notify(
            db,
            practice.user_id,
            NotificationType.PRACTICE_UPDATE,
            "Work started",
            f"Work on your {practice.type} request has started",
            link="/dashboard",
        )


def _update_progress(db: Session, practice: PracticeRequest, body: PracticeActionRequest) -> None:
    if practice.status != PracticeStatus.IN_PROGRESS.value:
        raise InvalidStateError(NOT_IN_PROGRESS)
    if "progress_notes" in body.model_fields_set:
        practice.progress_notes = (body.progress_notes or "").strip() or None
    if body.progress_percent is None:
        return
    practice.progress_percent = min(100, max(0, body.progress_percent))
    if practice.user_id is not None:
        notify(
            db,
            practice.user_id,
            NotificationType.PRACTICE_UPDATE,
            "Practice update",
            f"Your {practice.type} request is {practice.progress_percent}% complete",
            link="/dashboard",
        )


def _complete(db: Session, practice: PracticeRequest, body: PracticeActionRequest) -> None:
    if practice.status != PracticeStatus.IN_PROGRESS.value:
        raise InvalidStateError(NOT_IN_PROGRESS)
    practice.status = PracticeStatus.COMPLETED.value
    practice.progress_percent = 100
    practice.completed_at = utcnow()
    if practice.user_id is not None:
        notify(
            db,
            practice.user_id,
            NotificationType.PRACTICE_COMPLETED,
            "Practice completed",
            f"Your {practice.type} request has been completed",
            link="/dashboard",
        )


# action -> (handler, performed by the requester rather than the engineer)
ACTIONS: dict[str, tuple[Callable[..., None], bool]] = {
    "send-quote": (_send_quote, False),
    "accept-quote": (_accept_quote, True),
    "reject-quote": (_reject_quote, True),
    "start-work": (_start_work, False),
    "update-progress": (_update_progress, False),
    "complete": (_complete, False),
}


def apply_action(
    db: Session, practice_id: int, user: User, body: PracticeActionRequest
) -> PracticeRequestResponse:
    """
    Move a request through its lifecycle.

    Quote decisions belong to the requester. Every other step belongs to the
    assigned engineer or an admin. Anyone else gets 403.
    """
    practice = db.get(PracticeRequest, practice_id)
    if practice is None:
        raise NotFoundError("Practice request not found")
    if body.action not in ACTIONS:
        raise ValidationError("Invalid action")

    handler, by_requester = ACTIONS[body.action]
    if by_requester:
        allowed = practice.user_id is not None and practice.user_id == user.id
    else:
        allowed = practice.engineer_id == user.id or user.role == Role.ADMIN.value
    if not allowed:
        raise PermissionDeniedError("Not authorized")

    handler(db, practice, body)
    db.commit()
    logger.info(
        "Practice request updated",
        extra={
            "practice_id": practice_id,
            "action": body.action,
            "status": practice.status,
            "user_id": user.id,
        },
    )
    return PracticeRequestResponse.model_validate(_load(db, practice_id))
