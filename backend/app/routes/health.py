"""
Ulyngo Backend — Health Check Route
=====================================

What:  Liveness plus dependency status for probes and monitoring.
How:   Runs SELECT 1 against the database. Google Maps and Vertex AI are
       only reported as configured or not: probing them would spend quota.

Status levels:
    - healthy:   database reachable, every external API configured (HTTP 200)
    - degraded:  database reachable, some API not configured (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.config import settings
from app.database import engine
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def _configured(flag: bool) -> str:
    return "configured" if flag else "not_configured"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e)

    maps_status = _configured(bool(settings.google_maps_api_key))
    vertex_status = _configured(settings.vertex_configured)
    if overall == "healthy" and "not_configured" in (maps_status, vertex_status):
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        google_maps=maps_status,
        vertex_ai=vertex_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
