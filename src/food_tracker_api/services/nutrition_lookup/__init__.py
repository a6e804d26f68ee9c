"""
Nutrition Lookup Service - Facade pattern for nutrition database APIs.

Provides an abstraction layer for nutrition lookup with USDA FoodData Central
as the initial provider.
"""

from .base import (
    NutrientInfo,
    NutritionLookupError,
    NutritionLookupService,
    NutritionResult,
)
from .factory import get_nutrition_lookup_service
from .usda_provider import USDANutritionLookup

__all__ = [
    "NutrientInfo",
    "NutritionLookupError",
    "NutritionLookupService",
    "NutritionResult",
    "USDANutritionLookup",
    "get_nutrition_lookup_service",
]
