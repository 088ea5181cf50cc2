"""Health check: database reachability and placeholder-secret detection."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kodbank.core.config import Settings, ensure_configured, get_settings
from kodbank.core.database import check_db_connected, get_db
from kodbank.core.errors import ConfigurationError
from kodbank.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    cfg: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Report whether register/login can currently succeed.

    Always 200. "degraded" means the database is unreachable or secrets are
    still placeholders.
    """
    connected = check_db_connected(db)
    try:
        ensure_configured(cfg)
        configured = True
    except ConfigurationError:
        configured = False

    return HealthResponse(
        status="ok" if connected and configured else "degraded",
        environment=cfg.APP_ENV,
        database="connected" if connected else "disconnected",
        configured=configured,
    )
