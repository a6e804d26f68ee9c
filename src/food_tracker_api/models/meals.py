"""Pydantic models for the pattern summary and nutrition suggestion endpoints."""

from datetime import datetime

from pydantic import AliasChoices, ConfigDict, Field, TypeAdapter

from food_tracker_api.models.base import CamelModel


class MealRecord(CamelModel):
    """A food item logged by the user today.

    Accepts both the app's camelCase keys and the older snake_case keys
    (``meal_type_guess``, ``detected_ingredients`` ...).
    """

    model_config = ConfigDict(allow_inf_nan=False)

    name: str = Field("", description="Food name")
    calories: float = Field(0, ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0, validation_alias=AliasChoices("carbs", "carbohydrate"))
    fat: float = Field(0, ge=0)
    logged_at: datetime | None = Field(
        None,
        validation_alias=AliasChoices("loggedAt", "logged_at", "timestamp"),
        description="When the item was logged, in the user's local offset",
    )
    meal_type: str = Field(
        "snack",
        validation_alias=AliasChoices("mealType", "meal_type", "meal_type_guess"),
    )
    ingredients: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("ingredients", "detected_ingredients"),
    )
    portion_size: str = Field(
        "medium",
        validation_alias=AliasChoices("portionSize", "portion_size", "portion_size_estimate"),
    )
    cuisine: str | None = Field(
        None, validation_alias=AliasChoices("cuisine", "cuisine_guess")
    )
    location: str | None = None


MealRecordList = TypeAdapter(list[MealRecord])


class PatternSummary(CamelModel):
    """Narrative summary of the day's eating pattern."""

    summary: str = "Today's Eating Pattern"
    bullets: list[str] = Field(default_factory=list)
    overall: str = ""


class PatternSummaryResponse(CamelModel):
    """Success envelope for /api/pattern-summary."""

    success: bool = True
    summary: PatternSummary


class NutritionAdvice(CamelModel):
    """Personalized advice for a set of food items."""

    assessment: str = ""
    suggestions: list[str] = Field(default_factory=list)
    meal_timing: str | list[str] | None = None
    portion_advice: str | list[str] | None = None
    health_tips: list[str] = Field(default_factory=list)


class SuggestionsResponse(CamelModel):
    """Success envelope for /api/nutrition-suggestions."""

    success: bool = True
    suggestions: NutritionAdvice