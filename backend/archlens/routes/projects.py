"""
ArchLens Backend - Project Routes
==================================

What:  DELETE /api/projects/{id}

A "project" in the frontend is an analysis; deleting one removes the
analysis row.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from archlens.database import get_db_session
from archlens.exceptions import NotFoundError, RequestFailedError
from archlens.schemas.common import ErrorResponse, MessageResponse
from archlens.services.analysis_service import analysis_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Projects"])


@router.delete(
    "/projects/{project_id}",
    response_model=MessageResponse,
    responses={
        200: {"description": "Project deleted", "model": MessageResponse},
        404: {"description": "Project not found", "model": ErrorResponse},
        500: {"description": "Delete failed", "model": ErrorResponse},
    },
    summary="Delete a project",
)
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    try:
        deleted = await analysis_service.delete_analysis(db, project_id)
    except Exception as e:
        logger.error("Delete project error: %s", str(e))
        raise RequestFailedError.from_exception("Failed to delete project", e) from e

    if not deleted:
        raise NotFoundError(resource="Project", resource_id=project_id)

    logger.info("Project %s deleted", project_id)
    return MessageResponse(message="Project deleted successfully")
