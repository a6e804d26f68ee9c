"""
LLM provider for daily eating pattern summaries.
"""

import asyncio
import json
import logging
import time
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError

from food_tracker_api.core.config import Settings
from food_tracker_api.models.meals import MealRecord, PatternSummary
from food_tracker_api.services.llm import extract_json, get_llm, response_text

from .base import PatternSummaryError, PatternSummaryService
from .patterns import extract_patterns, format_meal_time

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You write a daily eating pattern summary for a food-tracking app.

The summary is purely descriptive. Never give advice, recommendations,
health conclusions or judgments of diet quality, and never classify foods as
"healthy", "balanced", "carb-heavy" and the like. Report only objective
observations, frequencies and comparisons drawn from the data.

About the data:
- Each entry is a FOOD ITEM, not a separate meal session.
- Use timestamp_display for times; it is already in the user's local time.
- Mention location only when it is present in the data.
- Address the user in the second person ("you", "your")."""


SUMMARY_PROMPT = """Food items logged today:
{meals}

Extracted patterns:
{patterns}

Write 3-6 bullets highlighting meaningful patterns:
- timing (first and latest food item, gaps, eating frequency)
- the largest meal TYPE, taken from largest_meal_type (only one type can be largest)
- share of total calories per meal type, from meal_type_calorie_distribution
- macro totals, always quoted from total_macros, and per-type values from
  meal_type_macro_distribution

Use actual numbers. A bullet that mentions calories from protein, carbs or fat
ends with "(estimated)". Do not mention ingredients, food names or portion sizes.

Then write one "overall" sentence that connects several of these patterns into
the single most interesting observation of the day.

Respond ONLY with JSON:
{{
  "summary": "Today's Eating Pattern",
  "bullets": ["string"],
  "overall": "string"
}}"""


def _meal_payload(meal: MealRecord) -> dict[str, Any]:
    """Prompt-facing view of one meal."""
    payload: dict[str, Any] = {
        "timestamp": meal.logged_at.isoformat() if meal.logged_at else None,
        "detected_ingredients": meal.ingredients,
        "cuisine_guess": meal.cuisine,
        "portion_size_estimate": meal.portion_size,
        "meal_type_guess": meal.meal_type,
        "calories": meal.calories,
        "carbs": meal.carbs,
        "protein": meal.protein,
        "fat": meal.fat,
    }
    if meal.logged_at is not None:
        payload["timestamp_display"] = format_meal_time(meal.logged_at)
    if meal.location and meal.location != "home":
        payload["location"] = meal.location
    return payload


class LLMPatternSummary(PatternSummaryService):
    """Pattern summaries from a chat model, grounded on extracted patterns."""

    def __init__(self, settings: Settings, llm: BaseChatModel | None = None):
        self.settings = settings
        self._llm = llm

    @property
    def provider_name(self) -> str:
        return self.settings.llm_provider.value

    def _get_llm(self) -> BaseChatModel:
        if self._llm is None:
            try:
                self._llm = get_llm(
                    self.settings, timeout=self.settings.summary_llm_timeout, max_tokens=1000
                )
            except ValueError as e:
                raise PatternSummaryError(
                    message=str(e), error_code="CONFIG_ERROR", provider=self.provider_name
                ) from e
        return self._llm

    def build_messages(self, meals: list[MealRecord]) -> list:
        """Build the chat messages for a list of meals."""
        prompt = SUMMARY_PROMPT.format(
            meals=json.dumps([_meal_payload(m) for m in meals], indent=2),
            patterns=json.dumps(extract_patterns(meals), indent=2),
        )
        return [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]

    async def summarize(self, meals: list[MealRecord]) -> PatternSummary:
        start_time = time.monotonic()
        llm = self._get_llm()
        messages = self.build_messages(meals)

        logger.info(f"Generating pattern summary for {len(meals)} meals")

        try:
            response = await asyncio.wait_for(
                llm.ainvoke(messages), timeout=self.settings.summary_llm_timeout
            )
        except TimeoutError as e:
            raise PatternSummaryError(
                message=f"Summary model timed out after {self.settings.summary_llm_timeout}s",
                error_code="TIMEOUT",
                provider=self.provider_name,
            ) from e
        except Exception as e:
            raise PatternSummaryError(
                message=f"Summary model error: {e}",
                error_code="PROVIDER_ERROR",
                provider=self.provider_name,
            ) from e

        summary = self._parse_summary(response_text(response))
        logger.info(
            "Pattern summary generated",
            extra={
                "bullets": len(summary.bullets),
                "duration_ms": int((time.monotonic() - start_time) * 1000),
            },
        )
        return summary

    def _parse_summary(self, raw_response: str) -> PatternSummary:
        json_str = extract_json(raw_response)
        if not json_str:
            raise PatternSummaryError(
                message="No JSON found in summary response",
                error_code="PARSE_ERROR",
                provider=self.provider_name,
            )
        try:
            return PatternSummary.model_validate(json.loads(json_str))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.debug(f"Raw summary response: {raw_response[:500]}")
            raise PatternSummaryError(
                message=f"Failed to parse summary response: {e}",
                error_code="PARSE_ERROR",
                provider=self.provider_name,
            ) from e
