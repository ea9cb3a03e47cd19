"""
ArchLens Backend - Analyses Collection Routes
==============================================

What:  Listing plus read/update/delete of single analyses under /api/analyses.
Who:   The history and analyses pages of the frontend.

Unlike GET /api/analysis/{id}, failures here include a `details` field with
the underlying error message.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from archlens.config import settings
from archlens.database import get_db_session
from archlens.exceptions import NotFoundError, RequestFailedError
from archlens.schemas.analysis import (
    AnalysisListResponse,
    AnalysisQuery,
    AnalysisResponse,
    AnalysisUpdate,
)
from archlens.schemas.common import ErrorResponse, MessageResponse
from archlens.services.analysis_service import analysis_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analyses"])


@router.get(
    "/analyses",
    response_model=AnalysisListResponse,
    responses={
        200: {"description": "Page of analyses", "model": AnalysisListResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List analyses with filtering and pagination",
)
async def list_analyses(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
    app_id: Optional[str] = Query(default=None, alias="appId"),
    environment: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    date_from: Optional[datetime] = Query(
        default=None, alias="dateFrom", description="Only analyses on or after (ISO 8601)"
    ),
    date_to: Optional[datetime] = Query(
        default=None, alias="dateTo", description="Only analyses on or before (ISO 8601)"
    ),
    db: AsyncSession = Depends(get_db_session),
) -> AnalysisListResponse:
    query = AnalysisQuery(
        page=page,
        limit=limit,
        app_id=app_id,
        environment=environment,
        status=status,
        date_from=date_from,
        date_to=date_to,
    )
    try:
        return await analysis_service.list_analyses(db, query)
    except Exception as e:
        logger.error("Analyses API error: %s", str(e))
        raise RequestFailedError.from_exception("Failed to fetch analyses", e) from e


@router.get(
    "/analyses/{analysis_id}",
    response_model=AnalysisResponse,
    responses={
        404: {"description": "Analysis not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get an analysis by ID",
)
async def get_analysis(
    analysis_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> AnalysisResponse:
    try:
        analysis = await analysis_service.get_analysis_by_id(db, analysis_id)
    except Exception as e:
        logger.error("Get analysis error: %s", str(e))
        raise RequestFailedError.from_exception("Failed to fetch analysis", e) from e

    if analysis is None:
        raise NotFoundError(resource="Analysis", resource_id=analysis_id)
    return analysis


@router.patch(
    "/analyses/{analysis_id}",
    response_model=AnalysisResponse,
    responses={
        404: {"description": "Analysis not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update fields of an analysis",
    description="Applies only the fields present in the body; unknown keys are ignored.",
)
async def update_analysis(
    analysis_id: str,
    updates: AnalysisUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> AnalysisResponse:
    try:
        analysis = await analysis_service.update_analysis(db, analysis_id, updates)
    except Exception as e:
        logger.error("Update analysis error: %s", str(e))
        raise RequestFailedError.from_exception("Failed to update analysis", e) from e

    if analysis is None:
        raise NotFoundError(resource="Analysis", resource_id=analysis_id)
    return analysis


@router.delete(
    "/analyses/{analysis_id}",
    response_model=MessageResponse,
    responses={
        404: {"description": "Analysis not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete an analysis",
)
async def delete_analysis(
    analysis_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    try:
        deleted = await analysis_service.delete_analysis(db, analysis_id)
    except Exception as e:
        logger.error("Delete analysis error: %s", str(e))
        raise RequestFailedError.from_exception("Failed to delete analysis", e) from e

    if not deleted:
        raise NotFoundError(resource="Analysis", resource_id=analysis_id)
    return MessageResponse(message="Analysis deleted successfully")
