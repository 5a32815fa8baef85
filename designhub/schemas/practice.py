"""Request/response schemas for permit-practice requests."""

from datetime import datetime

from pydantic import Field

from designhub.schemas.base import ApiModel
from designhub.schemas.upload import FileRecord


class PracticeRequestCreate(ApiModel):
    type: str | None = None
    property_type: str | None = None
    size: float | None = None
    location: str | None = None
    is_vincolato: bool = False
    has_old_permits: bool = False
    intervention_details: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    file_ids: list[int] = Field(default_factory=list)


class ContactSummary(ApiModel):
    id: int
    name: str
    email: str
    phone: str | None = None


class PracticeRequestResponse(ApiModel):
    id: int
    type: str
    property_type: str
    size: float | None = None
    location: str
    is_vincolato: bool
    has_old_permits: bool
    intervention_details: str | None = None
    contact_name: str
    contact_email: str
    contact_phone: str | None = None
    status: str
    user_id: int | None = None
    engineer_id: int | None = None
    quote_amount: float | None = None
    quote_valid_until: datetime | None = None
    quote_notes: str | None = None
    progress_percent: int = 0
    progress_notes: str | None = None
    completed_at: datetime | None = None
    created_at: datetime
    user: ContactSummary | None = None
    engineer: ContactSummary | None = None
    files: list[FileRecord] = Field(default_factory=list)


class PracticeRequestsListResponse(ApiModel):
    requests: list[PracticeRequestResponse]


class PracticeSummary(ApiModel):
    """What anyone other than the requester, the assigned engineer or an admin may see."""

    id: int
    type: str
    property_type: str
    location: str
    status: str


class PracticeActionRequest(ApiModel):
    """
    One lifecycle step. action is one of send-quote, accept-quote, reject-quote,
    start-work, update-progress or complete; the other fields belong to the
    action that uses them.
    """

    action: str | None = None
    quote_amount: float | None = None
    quote_valid_days: int = Field(default=30, ge=1)
    quote_notes: str | None = None
    progress_percent: int | None = None
    progress_notes: str | None = None
