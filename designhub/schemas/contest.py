"""Request/response schemas for contests and proposals."""

from datetime import datetime

from pydantic import Field

from designhub.schemas.base import ApiModel
from designhub.schemas.upload import FileRecord


class UserSummary(ApiModel):
    id: int
    name: str
    avatar_url: str | None = None


class ArchitectSummary(UserSummary):
    portfolio: str | None = None


class ContestCreateRequest(ApiModel):
    title: str | None = None
    description: str | None = None
    brief: str | None = None
    location: str | None = None
    category: str | None = None
    budget: float | None = None
    deadline: datetime | None = None
    image_url: str | None = None
    must_haves: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    deliverables: list[str] = Field(default_factory=list)


class ContestResponse(ApiModel):
    id: int
    title: str
    description: str
    brief: str | None = None
    location: str
    category: str
    budget: float
    deadline: datetime
    status: str
    image_url: str | None = None
    is_featured: bool
    must_haves: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    deliverables: list[str] = Field(default_factory=list)
    client_id: int
    created_at: datetime
    client: UserSummary
    proposals_count: int = 0
    days_remaining: int = 0


class ContestsListResponse(ApiModel):
    contests: list[ContestResponse]
    total: int
    page: int
    total_pages: int


class ProposalCreateRequest(ApiModel):
    description: str | None = None
    file_ids: list[int] = Field(default_factory=list)


class ProposalResponse(ApiModel):
    id: int
    contest_id: int
    architect_id: int
    description: str | None = None
    status: str
    submitted_at: datetime
    architect: ArchitectSummary
    files: list[FileRecord] = Field(default_factory=list)


class ProposalsListResponse(ApiModel):
    proposals: list[ProposalResponse]
    total: int


class ContestUpdateRequest(ApiModel):
    """Owner edit. Empty or missing fields are left unchanged."""

    title: str | None = None
    description: str | None = None
    brief: str | None = None
    location: str | None = None
    category: str | None = None
    budget: float | None = None
    deadline: datetime | None = None
    image_url: str | None = None
    status: str | None = None
    is_featured: bool | None = None
    must_haves: list[str] | None = None
    constraints: list[str] | None = None
    deliverables: list[str] | None = None


class DeleteResponse(ApiModel):
    success: bool = True
