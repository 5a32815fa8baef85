"""Schemas for uploaded file metadata."""

from datetime import datetime

from pydantic import Field

from designhub.schemas.base import ApiModel


class FileRecord(ApiModel):
    """Persisted file row as embedded in proposals and practice requests."""

    id: int
    filename: str
    original_name: str
    mime_type: str
    size: int
    url: str
    created_at: datetime


class UploadedFile(ApiModel):
    id: int
    filename: str = Field(..., description="Original file name as sent by the client")
    url: str
    size: int = Field(..., ge=0)
    mime_type: str


class UploadResponse(ApiModel):
    """Response after the blob is stored and its metadata persisted."""

    success: bool = True
    file: UploadedFile
