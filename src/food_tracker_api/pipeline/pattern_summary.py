"""Pattern summary pipeline: validate meals, summarize under a deadline."""

import logging
from typing import Any

from pydantic import ValidationError

from food_tracker_api.core.exceptions import APIError, ErrorCode
from food_tracker_api.models.meals import MealRecord, MealRecordList, PatternSummaryResponse
from food_tracker_api.services.pattern_summary import PatternSummaryError, PatternSummaryService

from .deadline import DeadlineSupervisor

logger = logging.getLogger(__name__)


def parse_meals(raw_meals: Any) -> list[MealRecord]:
    """
    Validate the caller's ``mealsToday`` value.

    Raises:
        APIError: INVALID_MEALS_DATA if it is not a list of meal objects,
            NO_MEALS if the list is empty
    """
    if not isinstance(raw_meals, list):
        raise APIError(ErrorCode.INVALID_MEALS_DATA, "mealsToday must be an array of meals")
    if not raw_meals:
        raise APIError(ErrorCode.NO_MEALS, "At least one meal is required")

    try:
        return MealRecordList.validate_python(raw_meals)
    except ValidationError as e:
        raise APIError(
            ErrorCode.INVALID_MEALS_DATA,
            "One or more meals are malformed",
            details={
                "errors": [
                    {"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()
                ]
            },
        ) from e


class PatternSummaryPipeline:
    """Produces one pattern summary or one typed error per request."""

    def __init__(self, service: PatternSummaryService, timeout: float = 70.0):
        self.service = service
        self.timeout = timeout

    async def run(self, raw_meals: Any) -> PatternSummaryResponse:
        meals = parse_meals(raw_meals)

        supervisor = DeadlineSupervisor(
            name="pattern_summary",
            budget_seconds=self.timeout,
            on_timeout=lambda: APIError(
                ErrorCode.PATTERN_SUMMARY_TIMEOUT,
                f"Pattern summary did not complete within {self.timeout:g} seconds",
            ),
        )
        return await supervisor.run(lambda: self._summarize(meals))

    async def _summarize(self, meals: list[MealRecord]) -> PatternSummaryResponse:
        try:
            summary = await self.service.summarize(meals)
        except PatternSummaryError as e:
            logger.error(f"Pattern summary failed ({e.error_code}): {e.message}")
            code = (
                ErrorCode.PATTERN_SUMMARY_TIMEOUT
                if e.error_code == "TIMEOUT"
                else ErrorCode.PATTERN_SUMMARY_FAILED
            )
            raise APIError(code, e.message) from e
        except Exception as e:
            logger.exception("Unexpected error during pattern summary")
            raise APIError(ErrorCode.PATTERN_SUMMARY_FAILED, str(e) or "Pattern summary failed") from e

        return PatternSummaryResponse(summary=summary)
