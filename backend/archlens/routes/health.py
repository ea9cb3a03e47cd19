"""
ArchLens Backend - Health Route
================================

What:  GET /health for container and load balancer probes.

Always HTTP 200; the body says whether the analysis store answered:
    {"status": "healthy",   "database": "connected",    ...}
    {"status": "unhealthy", "database": "disconnected", ...}
"""

import logging
import time

from fastapi import APIRouter

from archlens import __version__
from archlens.database import ping_database
from archlens.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

STARTED_AT = time.monotonic()


@router.get("/health", response_model=HealthResponse, summary="Liveness and database check")
async def health() -> HealthResponse:
    try:
        await ping_database()
        reachable = True
    except Exception as e:
        logger.warning("Health probe could not reach the database: %s", e)
        reachable = False

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.monotonic() - STARTED_AT, 2),
    )
