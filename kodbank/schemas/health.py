"""Health check body."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus the two things that make credential routes fail: DB and secrets."""

    status: Literal["ok", "degraded"]
    environment: str
    database: Literal["connected", "disconnected"]
    configured: bool = Field(
        description="False while DATABASE_URL or JWT_SECRET still hold placeholder values",
    )
