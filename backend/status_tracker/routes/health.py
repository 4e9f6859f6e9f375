"""
Status Tracker Backend: Health Check Route
===========================================

What:  Liveness endpoint for Docker health checks and uptime monitors.
How:   Runs SELECT 1 against the database and reports uptime, version and
       environment.

Status levels:
    database connected     → HTTP 200, success = true
    database disconnected  → HTTP 503, success = false
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from status_tracker import __version__
from status_tracker.config import settings
from status_tracker.database import engine, utcnow
from status_tracker.schemas.common import HealthData, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: set once at import, used for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    """
    Probe the database and report service liveness.

    SELECT 1 is enough to prove the connection and query path work without
    touching real tables.
    """
    db_status = "connected"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", e)

    healthy = db_status == "connected"
    if not healthy:
        response.status_code = 503

    return HealthResponse(
        success=healthy,
        message=(
            "Personal Status Tracker API is running"
            if healthy
            else "Personal Status Tracker API is degraded"
        ),
        data=HealthData(
            timestamp=utcnow(),
            uptime=round(time.time() - _start_time, 2),
            version=__version__,
            environment=settings.environment,
            database=db_status,
        ),
    )
