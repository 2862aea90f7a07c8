"""Liveness, readiness and health probes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll import __version__
from hr_payroll.api.dependencies import SessionFactory
from hr_payroll.database import ping

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service and database status."""

    status: str
    version: str
    database: str
    checked_at: datetime


def _database_reachable(session_factory: sessionmaker[Session]) -> bool:
    try:
        with session_factory() as session:
            return ping(session)
    except SQLAlchemyError as exc:
        logger.warning("Database ping failed: %s", exc)
        return False


@router.get("/health", response_model=HealthResponse)
def health(session_factory: SessionFactory) -> HealthResponse:
    """Report degraded rather than failing when the database is down."""
    reachable = _database_reachable(session_factory)
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        version=__version__,
        database="reachable" if reachable else "unreachable",
        checked_at=datetime.now(timezone.utc),
    )


@router.get("/ready")
def ready(session_factory: SessionFactory, response: Response) -> dict[str, str]:
    """Ready once the database answers; 503 until then."""
    if not _database_reachable(session_factory):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "waiting for database"}
    return {"status": "ready"}


@router.get("/live")
def live() -> dict[str, str]:
    return {"status": "alive"}
