"""Enrichment orchestrator with fallback to the unenriched result."""

import asyncio
import logging

from food_tracker_api.models.analysis import FoodAnalysis
from food_tracker_api.services.nutrition_enhancement import NutritionEnhancementService

logger = logging.getLogger(__name__)


class EnrichmentOrchestrator:
    """
    Runs the enhancement collaborator and absorbs its failures.

    ``enrich`` never raises for collaborator problems: the recognition result
    is returned as-is whenever the enhancer fails, times out, or returns an
    analysis whose items do not line up with the input.
    """

    def __init__(self, enhancer: NutritionEnhancementService, timeout: float = 10.0):
        self.enhancer = enhancer
        self.timeout = timeout

    async def enrich(self, analysis: FoodAnalysis) -> FoodAnalysis:
        try:
            enriched = await asyncio.wait_for(self.enhancer.enrich(analysis), timeout=self.timeout)
        except TimeoutError:
            logger.warning(
                f"Nutrition enhancement timed out after {self.timeout}s, using AI estimates",
                extra={"provider": self.enhancer.provider_name},
            )
            return analysis
        except Exception as e:
            logger.warning(
                f"Nutrition enhancement failed, using AI estimates: {e}",
                extra={"provider": self.enhancer.provider_name},
            )
            return analysis

        if not self._preserves_items(analysis, enriched):
            logger.warning(
                "Nutrition enhancement changed the item list, using AI estimates",
                extra={"provider": self.enhancer.provider_name},
            )
            return analysis

        return enriched

    @staticmethod
    def _preserves_items(original: FoodAnalysis, enriched: object) -> bool:
        if not isinstance(enriched, FoodAnalysis):
            return False
        if len(enriched.items) != len(original.items):
            return False
        return all(
            before.id == after.id and before.name == after.name
            for before, after in zip(original.items, enriched.items)
        )
