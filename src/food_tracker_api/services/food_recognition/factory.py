"""
Factory for creating food recognition service instances.

Reads configuration from settings and returns the appropriate provider.
"""

import logging
from functools import lru_cache

from food_tracker_api.core.config import get_settings

from .base import FoodRecognitionService
from .llm_provider import LLMFoodRecognition

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_food_recognition_service() -> FoodRecognitionService:
    """
    Get the configured food recognition service.

    The underlying chat models are created on first use, so a missing API key
    surfaces as a classified ``RecognitionError`` on the request that needs
    it rather than at startup.
    """
    settings = get_settings()

    if not settings.is_llm_configured:
        logger.warning(
            f"LLM provider '{settings.llm_provider.value}' has no API key; "
            "recognition requests will fail with API_KEY_ERROR"
        )

    service = LLMFoodRecognition(settings)
    logger.info(f"Initializing food recognition provider: {service.provider_name}")
    return service


def clear_service_cache():
    """Clear the cached service instance (useful for testing)."""
    get_food_recognition_service.cache_clear()
