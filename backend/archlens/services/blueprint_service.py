"""
ArchLens Backend - Blueprint Service
=====================================

What:  Blueprint rating.
How:   Validates the rating and echoes it back. Nothing is written to the
       database: blueprints are not stored by this service.
"""

import logging
import math
from typing import Any

from archlens.exceptions import ValidationError
from archlens.schemas.blueprint import RatingResponse

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def is_valid_rating(rating: Any) -> bool:
    """
    True for a real number within [MIN_RATING, MAX_RATING].

    Booleans, strings, None and NaN are rejected.
    """
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        return False
    if isinstance(rating, float) and math.isnan(rating):
        return False
    return MIN_RATING <= rating <= MAX_RATING


class BlueprintService:

    async def rate_blueprint(self, blueprint_id: str, rating: Any) -> RatingResponse:
        """
        Accept a rating for a blueprint.

        Raises:
            ValidationError: rating missing, non-numeric, or outside 1-5.
        """
        if not is_valid_rating(rating):
            raise ValidationError(
                message=f"Rating must be between {MIN_RATING} and {MAX_RATING}",
                field="rating",
                context={"blueprint_id": blueprint_id, "rating": repr(rating)},
            )

        # TODO: persist one rating per user and recompute the blueprint's
        # average once blueprints are stored in this database.
        logger.info("Blueprint %s rated %s", blueprint_id, rating)
        return RatingResponse(id=blueprint_id, rating=rating)


blueprint_service = BlueprintService()
