"""
ArchLens Backend - Analysis Detail Route
=========================================

What:  GET /api/analysis/{id}, the analysis page's data source.
How:   Ensures the database is reachable, looks the analysis up, returns it.

Errors:
    400  id missing or blank          {"error": "Analysis ID is required"}
    404  no analysis with that id     {"error": "Analysis not found"}
    500  anything else                {"error": "Failed to fetch analysis"}

The 500 body carries no `details`; the cause is logged only.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from archlens.database import connect_to_database, get_db_session
from archlens.exceptions import NotFoundError, RequestFailedError, ValidationError
from archlens.schemas.analysis import AnalysisResponse
from archlens.schemas.common import ErrorResponse
from archlens.services.analysis_service import analysis_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analysis"])


@router.get(
    "/analysis/{analysis_id}",
    response_model=AnalysisResponse,
    responses={
        200: {"description": "The stored analysis", "model": AnalysisResponse},
        400: {"description": "Analysis ID missing", "model": ErrorResponse},
        404: {"description": "Analysis not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get an analysis by ID",
    description=(
        "Returns the stored analysis. The ID may be the primary `_id` or the "
        "custom `id` assigned when the analysis was created."
    ),
)
async def get_analysis(
    analysis_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> AnalysisResponse:
    try:
        await connect_to_database()

        logger.info("Fetching analysis with ID: %s", analysis_id)
        if not analysis_id.strip():
            raise ValidationError(message="Analysis ID is required", field="id")

        analysis = await analysis_service.get_analysis_by_id(db, analysis_id)
        if analysis is None:
            raise NotFoundError(resource="Analysis", resource_id=analysis_id)

        logger.info(
            "Analysis found: id=%s appId=%s componentName=%s fileName=%s",
            analysis.record_id,
            analysis.app_id,
            analysis.component_name,
            analysis.file_name,
        )
        return analysis

    except (ValidationError, NotFoundError):
        raise
    except Exception as e:
        logger.error("Error fetching analysis %s: %s", analysis_id, str(e))
        raise RequestFailedError.from_exception(
            "Failed to fetch analysis", e, include_details=False
        ) from e


@router.get("/analysis/", include_in_schema=False)
async def get_analysis_without_id() -> None:
    """The id segment was left empty (`/api/analysis/`)."""
    raise ValidationError(message="Analysis ID is required", field="id")
