"""
Factory for creating nutrition lookup service instances.

Reads configuration from settings and returns the appropriate provider.
"""

import logging
from functools import lru_cache

from food_tracker_api.core.config import get_settings

from .base import NutritionLookupService
from .usda_provider import USDANutritionLookup

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_nutrition_lookup_service() -> NutritionLookupService | None:
    """
    Get the configured nutrition lookup service.

    Returns:
        Configured NutritionLookupService instance, or None if not configured
    """
    settings = get_settings()

    if not settings.is_usda_configured:
        logger.warning("USDA nutrition lookup not configured (missing API key or disabled)")
        return None

    logger.info("Initializing USDA nutrition lookup service")

    return USDANutritionLookup(
        api_key=settings.usda_api_key,
        base_url=settings.usda_api_base_url,
        timeout=settings.enrichment_timeout,
    )


def clear_service_cache():
    """Clear the cached service instance (useful for testing)."""
    get_nutrition_lookup_service.cache_clear()
