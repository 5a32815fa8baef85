"""Health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = "ok"
    environment: Literal["dev", "prod"]
    database: Literal["connected", "disconnected"]
    storage: Literal["memory", "s3"] = Field(description="Configured blob storage backend")
