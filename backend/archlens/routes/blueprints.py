"""
ArchLens Backend - Blueprint Routes
====================================

What:  POST /api/blueprints/{id}/rate

The body is read as raw JSON instead of a Pydantic model so that a missing
or out-of-range rating is a 400 with the rating message (not FastAPI's 422),
and an unparseable body is a 500 "Failed to rate blueprint".
"""

import logging

from fastapi import APIRouter, Request

from archlens.exceptions import RequestFailedError, ValidationError
from archlens.schemas.blueprint import RatingResponse
from archlens.schemas.common import ErrorResponse
from archlens.services.blueprint_service import blueprint_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Blueprints"])


@router.post(
    "/blueprints/{blueprint_id}/rate",
    response_model=RatingResponse,
    responses={
        200: {"description": "Rating accepted", "model": RatingResponse},
        400: {"description": "Rating missing or outside 1-5", "model": ErrorResponse},
        500: {"description": "Malformed body or server error", "model": ErrorResponse},
    },
    summary="Rate a blueprint",
    description='Body: `{"rating": <number between 1 and 5>}`.',
)
async def rate_blueprint(blueprint_id: str, request: Request) -> RatingResponse:
    try:
        body = await request.json()
        rating = body.get("rating") if isinstance(body, dict) else None
        return await blueprint_service.rate_blueprint(blueprint_id, rating)

    except ValidationError:
        raise
    except Exception as e:
        logger.error("Error rating blueprint %s: %s", blueprint_id, str(e))
        raise RequestFailedError.from_exception(
            "Failed to rate blueprint", e, include_details=False
        ) from e
