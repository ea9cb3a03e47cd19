"""
ArchLens Backend - Dashboard Route
===================================

What:  GET /api/dashboard, aggregate statistics for the home page.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from archlens.database import get_db_session
from archlens.exceptions import RequestFailedError
from archlens.schemas.analysis import DashboardStats
from archlens.schemas.common import ErrorResponse
from archlens.services.analysis_service import analysis_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Dashboard"])


@router.get(
    "/dashboard",
    response_model=DashboardStats,
    responses={
        200: {"description": "Dashboard statistics", "model": DashboardStats},
        500: {"description": "Statistics unavailable", "model": ErrorResponse},
    },
    summary="Get dashboard statistics",
    description=(
        "Counts, average scores and environment/risk distributions over "
        "completed analyses."
    ),
)
async def get_dashboard(
    db: AsyncSession = Depends(get_db_session),
) -> DashboardStats:
    """
    On failure the response carries `details` with the cause, e.g.

        {"error": "Failed to fetch dashboard statistics",
         "details": "Failed to fetch dashboard statistics"}
    """
    try:
        return await analysis_service.get_dashboard_stats(db)
    except Exception as e:
        logger.error("Dashboard API error: %s", str(e))
        raise RequestFailedError.from_exception(
            "Failed to fetch dashboard statistics", e
        ) from e
