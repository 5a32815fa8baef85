"""Upload endpoint: store the raw request body in blob storage and record its metadata."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from designhub.api.deps import get_app_settings, get_current_user
from designhub.core.config import Settings
from designhub.core.database import get_db
from designhub.models import User
from designhub.schemas.upload import UploadResponse
from designhub.services.files import store_upload
from designhub.services.storage import StorageClient, get_storage

router = APIRouter()


@router.post("", response_model=UploadResponse)
async def upload_file(
    request: Request,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[StorageClient, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    filename: str | None = None,
    contest_id: Annotated[int | None, Query(alias="contestId")] = None,
    proposal_id: Annotated[int | None, Query(alias="proposalId")] = None,
    practice_id: Annotated[int | None, Query(alias="practiceId")] = None,
) -> UploadResponse:
    """
    Upload one file as the raw request body.

    - **filename** (query, required): original file name.
    - **contestId / proposalId / practiceId** (query, optional): link the file on creation.
    - The request Content-Type is stored as the file's MIME type
      (application/octet-stream when absent).
    """
    body = await request.body()
    # Blob storage and the database are blocking clients; keep them off the event loop.
    return await run_in_threadpool(
        store_upload,
        db,
        storage,
        user_id=user.id,
        filename=filename,
        body=body,
        content_type=request.headers.get("content-type"),
        max_bytes=settings.MAX_UPLOAD_BYTES,
        contest_id=contest_id,
        proposal_id=proposal_id,
        practice_id=practice_id,
    )
