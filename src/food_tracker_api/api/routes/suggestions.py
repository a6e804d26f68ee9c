"""Nutrition suggestion API routes."""

import json
import logging

from fastapi import APIRouter, Request

from food_tracker_api.api.dependencies import SuggestionServiceDep
from food_tracker_api.core.exceptions import APIError, ErrorCode
from food_tracker_api.models.analysis import ErrorResponse
from food_tracker_api.models.meals import SuggestionsResponse
from food_tracker_api.services.suggestions import SuggestionError

router = APIRouter(responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
logger = logging.getLogger(__name__)


@router.post("/nutrition-suggestions", response_model=SuggestionsResponse)
async def nutrition_suggestions(
    request: Request,
    service: SuggestionServiceDep,
) -> SuggestionsResponse:
    """
    Personalized nutrition advice for a list of food items.

    Body: ``{"foodItems": [...], "userGoals": {...}}``
    """
    try:
        body = json.loads(await request.body() or b"{}")
    except ValueError as e:
        raise APIError(ErrorCode.INVALID_FOOD_ITEMS, f"Invalid JSON body: {e}") from e

    if not isinstance(body, dict) or not isinstance(body.get("foodItems"), list):
        raise APIError(ErrorCode.INVALID_FOOD_ITEMS, "foodItems must be an array")

    user_goals = body.get("userGoals")
    if not isinstance(user_goals, dict):
        user_goals = None

    try:
        advice = await service.suggest(body["foodItems"], user_goals)
    except SuggestionError as e:
        logger.error(f"Suggestion generation failed: {e.message}")
        raise APIError(ErrorCode.SUGGESTIONS_FAILED, e.message) from e

    return SuggestionsResponse(suggestions=advice)
