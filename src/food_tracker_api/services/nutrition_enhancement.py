"""
Nutrition enhancement for recognition results.

Replaces the vision model's macro guesses with nutrition-database values
where a confident database match exists.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from food_tracker_api.models.analysis import FoodAnalysis, FoodItem, NutritionSource
from food_tracker_api.services.nutrition_lookup import (
    NutritionLookupError,
    NutritionLookupService,
    NutritionResult,
)

logger = logging.getLogger(__name__)


class NutritionEnhancementError(Exception):
    """Error during nutrition enhancement."""

    def __init__(
        self,
        message: str,
        error_code: str = "ENHANCEMENT_ERROR",
        provider: str = "unknown",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.provider = provider
        self.details = details or {}


class NutritionEnhancementService(ABC):
    """
    Abstract base class for nutrition enhancement services.

    Implementations must return every input item, in the input order.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        ...

    @abstractmethod
    async def enrich(self, analysis: FoodAnalysis) -> FoodAnalysis:
        """
        Enrich a recognition result with database nutrition values.

        Raises:
            NutritionEnhancementError: If enhancement fails
        """
        ...


class DatabaseNutritionEnhancer(NutritionEnhancementService):
    """Enhances items from a NutritionLookupService (USDA by default)."""

    def __init__(self, lookup: NutritionLookupService, min_match_score: float = 0.5):
        self.lookup = lookup
        self.min_match_score = min_match_score

    @property
    def provider_name(self) -> str:
        return self.lookup.provider_name

    async def enrich(self, analysis: FoodAnalysis) -> FoodAnalysis:
        if not analysis.items:
            return analysis

        results = await asyncio.gather(
            *(self.lookup.search_food(item.name) for item in analysis.items),
            return_exceptions=True,
        )

        failures = []
        items = []
        for item, result in zip(analysis.items, results):
            if isinstance(result, NutritionLookupError):
                logger.warning(f"Nutrition lookup failed for '{item.name}': {result.message}")
                failures.append(result)
                items.append(item)
            elif isinstance(result, BaseException):
                raise result
            else:
                items.append(self._apply(item, result))

        if len(failures) == len(items):
            # Every lookup failed
            error = failures[0]
            raise NutritionEnhancementError(
                message=f"Nutrition lookup failed: {error.message}",
                error_code=error.error_code,
                provider=self.provider_name,
                details=error.details,
            ) from error

        matched = sum(1 for item in items if item.nutrition_source == NutritionSource.USDA)
        logger.info(
            f"Enhanced {matched}/{len(items)} items from {self.provider_name}",
            extra={"matched": matched, "total": len(items), "failed": len(failures)},
        )
        return analysis.model_copy(update={"items": items})

    def _apply(self, item: FoodItem, result: NutritionResult) -> FoodItem:
        """Use database values for one item if the match is good enough."""
        if (
            not result.found
            or result.nutrients is None
            or result.match_score < self.min_match_score
            or not item.estimated_grams
        ):
            return item

        scaled = result.nutrients.scale_to_grams(item.estimated_grams)
        update = {
            "protein": round(scaled.protein, 1),
            "carbs": round(scaled.carbs, 1),
            "fat": round(scaled.fat, 1),
            "fiber": round(scaled.fiber, 1),
            "nutrition_source": NutritionSource.USDA,
            "database_match": result.food_name,
        }
        if scaled.calories is not None:
            update["calories"] = round(scaled.calories)
        return item.model_copy(update=update)


class NoOpNutritionEnhancer(NutritionEnhancementService):
    """Returns the analysis unchanged; used when no database is configured."""

    @property
    def provider_name(self) -> str:
        return "none"

    async def enrich(self, analysis: FoodAnalysis) -> FoodAnalysis:
        return analysis
