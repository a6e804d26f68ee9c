"""Tests for the cached service factories."""

import pytest

from food_tracker_api.api.dependencies import get_nutrition_enhancer
from food_tracker_api.core.config import get_settings
from food_tracker_api.services.food_recognition import LLMFoodRecognition
from food_tracker_api.services.food_recognition import factory as recognition_factory
from food_tracker_api.services.nutrition_enhancement import (
    DatabaseNutritionEnhancer,
    NoOpNutritionEnhancer,
)
from food_tracker_api.services.nutrition_lookup import USDANutritionLookup
from food_tracker_api.services.nutrition_lookup import factory as lookup_factory
from food_tracker_api.services.pattern_summary import LLMPatternSummary
from food_tracker_api.services.pattern_summary import factory as summary_factory


def _clear_caches():
    get_settings.cache_clear()
    recognition_factory.clear_service_cache()
    lookup_factory.clear_service_cache()
    summary_factory.clear_service_cache()
    get_nutrition_enhancer.cache_clear()


@pytest.fixture(autouse=True)
def fresh_caches():
    _clear_caches()
    yield
    _clear_caches()


class TestFactories:
    """Tests for provider factories."""

    def test_recognition_service_is_cached(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "test-key")

        first = recognition_factory.get_food_recognition_service()

        assert isinstance(first, LLMFoodRecognition)
        assert recognition_factory.get_food_recognition_service() is first

    def test_summary_service_without_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "")

        assert isinstance(summary_factory.get_pattern_summary_service(), LLMPatternSummary)

    def test_lookup_disabled_without_usda_key(self, monkeypatch):
        monkeypatch.setenv("USDA_API_KEY", "")

        assert lookup_factory.get_nutrition_lookup_service() is None
        assert isinstance(get_nutrition_enhancer(), NoOpNutritionEnhancer)

    def test_lookup_enabled_with_usda_key(self, monkeypatch):
        monkeypatch.setenv("USDA_API_KEY", "usda-key")
        monkeypatch.setenv("USDA_ENABLED", "true")

        lookup = lookup_factory.get_nutrition_lookup_service()

        assert isinstance(lookup, USDANutritionLookup)
        assert isinstance(get_nutrition_enhancer(), DatabaseNutritionEnhancer)
