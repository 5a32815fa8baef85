"""Uploaded file metadata: storing new uploads and linking files to proposals and practices."""

import logging

from sqlalchemy.orm import Session

from designhub.core.errors import PayloadTooLargeError, ServiceFailure, ValidationError
from designhub.models import File
from designhub.schemas.upload import UploadedFile, UploadResponse
from designhub.services.storage import StorageClient, unique_pathname

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def attach_files(
    db: Session,
    file_ids: list[int],
    *,
    owner_id: int,
    proposal_id: int | None = None,
    practice_id: int | None = None,
) -> int:
    """
    Link the owner's uploaded files to a proposal or practice request.

    Ids belonging to other users are ignored. Staged in the caller's transaction.
    """
    if not file_ids:
        return 0
    values: dict = {}
    if proposal_id is not None:
        values[File.proposal_id] = proposal_id
    if practice_id is not None:
        values[File.practice_id] = practice_id
    if not values:
        return 0
    return (
        db.query(File)
        .filter(File.id.in_(file_ids), File.user_id == owner_id)
        .update(values, synchronize_session=False)
    )


def store_upload(
    db: Session,
    storage: StorageClient,
    *,
    user_id: int,
    filename: str | None,
    body: bytes,
    content_type: str | None,
    max_bytes: int,
    contest_id: int | None = None,
    proposal_id: int | None = None,
    practice_id: int | None = None,
) -> UploadResponse:
    """
    Put the raw body into blob storage and persist its metadata row.

    Storage or database failures surface as ServiceFailure("Upload failed").
    """
    if not filename:
        raise ValidationError("Filename is required")
    if len(body) > max_bytes:
        raise PayloadTooLargeError(
            f"File size must not exceed {max_bytes // (1024 * 1024)} MB."
        )
    mime_type = content_type or DEFAULT_CONTENT_TYPE

    try:
        blob = storage.put(unique_pathname(filename), body, mime_type)
        row = File(
            filename=blob.pathname,
            original_name=filename,
            mime_type=mime_type,
            size=len(body),
            url=blob.url,
            user_id=user_id,
            contest_id=contest_id,
            proposal_id=proposal_id,
            practice_id=practice_id,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
    except Exception as e:
        db.rollback()
        logger.exception("Upload failed", extra={"user_id": user_id, "upload_name": filename})
        raise ServiceFailure("Upload failed", cause=e) from e

    logger.info(
        "File uploaded",
        extra={"user_id": user_id, "file_id": row.id, "size": row.size, "mime_type": mime_type},
    )
    return UploadResponse(
        success=True,
        file=UploadedFile(
            id=row.id,
            filename=row.original_name,
            url=row.url,
            size=row.size,
            mime_type=row.mime_type,
        ),
    )
