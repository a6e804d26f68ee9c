"""Pattern summary API routes."""

import json
import logging

from fastapi import APIRouter, Request

from food_tracker_api.api.dependencies import PatternSummaryPipelineDep
from food_tracker_api.core.exceptions import APIError, ErrorCode
from food_tracker_api.models.analysis import ErrorResponse
from food_tracker_api.models.meals import PatternSummaryResponse

router = APIRouter(responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
logger = logging.getLogger(__name__)


@router.post("/pattern-summary", response_model=PatternSummaryResponse)
async def pattern_summary(
    request: Request,
    pipeline: PatternSummaryPipelineDep,
) -> PatternSummaryResponse:
    """
    Summarize today's eating pattern.

    Body: ``{"mealsToday": [{"name": ..., "calories": ..., "timestamp": ...}, ...]}``

    The summary is descriptive only: timing, meal type shares and macro
    totals, never advice.
    """
    try:
        body = json.loads(await request.body() or b"{}")
    except ValueError as e:
        raise APIError(ErrorCode.INVALID_MEALS_DATA, f"Invalid JSON body: {e}") from e

    meals = body.get("mealsToday") if isinstance(body, dict) else None
    logger.info(
        "Pattern summary requested",
        extra={"meal_count": len(meals) if isinstance(meals, list) else None},
    )
    return await pipeline.run(meals)
