"""
Nutrition suggestions for a set of food items.

Unlike pattern summaries, this endpoint is explicitly advisory: it returns an
assessment plus concrete suggestions for the user's stated goals.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from pydantic import ValidationError

from food_tracker_api.core.config import Settings, get_settings
from food_tracker_api.models.meals import NutritionAdvice
from food_tracker_api.services.llm import extract_json, get_llm, response_text

logger = logging.getLogger(__name__)


SUGGESTIONS_PROMPT = """Based on these food items and user goals, provide personalized nutrition advice.

Food items: {food_items}
User goals: {user_goals}

Provide:
1. An overall nutrition assessment
2. Suggestions for improvement
3. Meal timing recommendations
4. Portion size advice
5. Health tips

Respond ONLY with JSON:
{{
  "assessment": "string",
  "suggestions": ["string"],
  "meal_timing": "string",
  "portion_advice": "string",
  "health_tips": ["string"]
}}"""


class SuggestionError(Exception):
    """Error while generating nutrition suggestions."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.message = message
        self.provider = provider


class NutritionSuggestionService(ABC):
    """Abstract base class for nutrition suggestion services."""

    @abstractmethod
    async def suggest(
        self, food_items: list[dict[str, Any]], user_goals: dict[str, Any] | None
    ) -> NutritionAdvice:
        """
        Generate advice for a set of food items.

        Raises:
            SuggestionError: If advice cannot be produced
        """
        ...


class LLMNutritionSuggestions(NutritionSuggestionService):
    """Nutrition suggestions from a chat model."""

    def __init__(self, settings: Settings, llm: BaseChatModel | None = None):
        self.settings = settings
        self._llm = llm

    def _get_llm(self) -> BaseChatModel:
        if self._llm is None:
            try:
                self._llm = get_llm(
                    self.settings,
                    timeout=self.settings.suggestions_timeout,
                    temperature=0.4,
                    max_tokens=1000,
                )
            except ValueError as e:
                raise SuggestionError(str(e), provider=self.settings.llm_provider.value) from e
        return self._llm

    async def suggest(
        self, food_items: list[dict[str, Any]], user_goals: dict[str, Any] | None
    ) -> NutritionAdvice:
        llm = self._get_llm()
        prompt = SUGGESTIONS_PROMPT.format(
            food_items=json.dumps(food_items, default=str),
            user_goals=json.dumps(user_goals or {}, default=str),
        )

        logger.info(f"Generating nutrition suggestions for {len(food_items)} items")

        try:
            response = await asyncio.wait_for(
                llm.ainvoke([HumanMessage(content=prompt)]),
                timeout=self.settings.suggestions_timeout,
            )
        except TimeoutError as e:
            raise SuggestionError("Suggestion model timed out") from e
        except Exception as e:
            raise SuggestionError(f"Suggestion model error: {e}") from e

        raw_response = response_text(response)
        json_str = extract_json(raw_response)
        try:
            return NutritionAdvice.model_validate(json.loads(json_str or ""))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Unparseable suggestions response: {raw_response[:200]}")
            raise SuggestionError("Failed to parse suggestions response") from e


@lru_cache(maxsize=1)
def get_suggestion_service() -> NutritionSuggestionService:
    """Get the configured nutrition suggestion service."""
    return LLMNutritionSuggestions(get_settings())
