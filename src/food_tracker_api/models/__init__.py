"""Pydantic models package."""

from food_tracker_api.models.analysis import (
    AnalysisRequest,
    AnalysisResponse,
    ErrorResponse,
    FoodAnalysis,
    FoodItem,
    MacroEstimate,
    MacroEstimateResponse,
    MacroGuess,
    NormalizedImage,
    NutritionSource,
    PortionSize,
)
from food_tracker_api.models.meals import (
    MealRecord,
    MealRecordList,
    NutritionAdvice,
    PatternSummary,
    PatternSummaryResponse,
    SuggestionsResponse,
)

__all__ = [
    # Analysis
    "AnalysisRequest",
    "AnalysisResponse",
    "ErrorResponse",
    "FoodAnalysis",
    "FoodItem",
    "MacroEstimate",
    "MacroEstimateResponse",
    "MacroGuess",
    "NormalizedImage",
    "NutritionSource",
    "PortionSize",
    # Meals
    "MealRecord",
    "MealRecordList",
    "NutritionAdvice",
    "PatternSummary",
    "PatternSummaryResponse",
    "SuggestionsResponse",
]
