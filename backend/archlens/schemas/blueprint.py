"""
ArchLens Backend - Blueprint Schemas
=====================================

Only the rating exchange lives here; blueprints themselves are not stored
by this service.
"""

from typing import Union

from pydantic import BaseModel, Field


class RatingResponse(BaseModel):
    """
    Returned by POST /api/blueprints/{id}/rate.

    Example:
        {"id": "bp-42", "rating": 4, "message": "Rating updated successfully"}
    """
    id: str = Field(description="Blueprint identifier from the URL")
    rating: Union[int, float] = Field(description="Accepted rating, echoed as sent")
    message: str = Field(default="Rating updated successfully")
