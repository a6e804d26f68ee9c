"""
Factory for the pattern summary service.
"""

import logging
from functools import lru_cache

from food_tracker_api.core.config import get_settings

from .base import PatternSummaryService
from .llm_provider import LLMPatternSummary

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_pattern_summary_service() -> PatternSummaryService:
    """
    Get the configured pattern summary service.

    Returns:
        PatternSummaryService backed by the configured LLM provider
    """
    settings = get_settings()
    if not settings.is_llm_configured:
        logger.warning(
            f"LLM provider '{settings.llm_provider.value}' is not configured; "
            "pattern summaries will fail until an API key is set"
        )
    return LLMPatternSummary(settings)


def clear_service_cache():
    """Clear the cached service instance (useful for testing)."""
    get_pattern_summary_service.cache_clear()
