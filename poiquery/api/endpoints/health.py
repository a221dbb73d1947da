"""Liveness and readiness probes, served outside the /api prefix."""

from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from fastapi import APIRouter
from sqlalchemy import text

from poiquery import __version__
from poiquery.api.deps import DBSession
from poiquery.core.config import settings

router = APIRouter(tags=["Health"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _probe_database(db) -> Tuple[str, str]:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return "unhealthy", str(e)
    return "healthy", "Connected"


@router.get("/health", response_model=Dict[str, Any], summary="Liveness probe")
async def health_check() -> Dict[str, Any]:
    """Report that the process is up, with its version and environment."""
    return {
        "status": "healthy",
        "timestamp": _timestamp(),
        "environment": settings.APP_ENV,
        "version": __version__,
    }


@router.get("/health/ready", response_model=Dict[str, Any], summary="Readiness probe")
async def readiness_check(db: DBSession) -> Dict[str, Any]:
    """Report whether the database answers a trivial query.

    The endpoint always returns 200; ``status`` is ``ready`` or
    ``not_ready`` and ``checks.database`` carries the probe result.
    """
    db_status, db_message = await _probe_database(db)
    return {
        "status": "ready" if db_status == "healthy" else "not_ready",
        "timestamp": _timestamp(),
        "checks": {"database": {"status": db_status, "message": db_message}},
    }
