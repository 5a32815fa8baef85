"""Liveness check: reports database reachability and the configured storage backend."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from designhub.api.deps import get_app_settings
from designhub.core.config import Settings
from designhub.core.database import check_db_connected, get_db
from designhub.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """Always 200; status is "degraded" when the database does not answer."""
    connected = check_db_connected(db)
    return HealthResponse(
        status="ok" if connected else "degraded",
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
        storage=settings.STORAGE_BACKEND,
    )
