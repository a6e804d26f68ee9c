"""
Base classes and models for nutrition lookup service.

Defines the abstract interface that all providers must implement,
plus standardized response models.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class NutrientInfo(BaseModel):
    """Nutrient information from the database."""

    # Primary macros (grams per serving)
    carbs: float = Field(ge=0, description="Carbohydrates in grams")
    protein: float = Field(ge=0, description="Protein in grams")
    fat: float = Field(ge=0, description="Total fat in grams")
    fiber: float = Field(ge=0, default=0, description="Dietary fiber in grams")
    calories: float | None = Field(None, ge=0, description="Energy in kcal")

    # Serving info
    serving_size_g: float = Field(100, ge=0, description="Serving size in grams")

    def scale_to_grams(self, grams: float) -> "NutrientInfo":
        """Scale nutrients to a specific gram amount."""
        if self.serving_size_g == 0:
            return self

        scale = grams / self.serving_size_g
        return NutrientInfo(
            carbs=self.carbs * scale,
            protein=self.protein * scale,
            fat=self.fat * scale,
            fiber=self.fiber * scale,
            calories=self.calories * scale if self.calories is not None else None,
            serving_size_g=grams,
        )


class NutritionResult(BaseModel):
    """Result of a nutrition database search."""

    found: bool = Field(..., description="Whether a match was found")
    food_id: str | None = Field(None, description="Database food ID (e.g., USDA FDC ID)")
    food_name: str | None = Field(None, description="Official food name from database")
    nutrients: NutrientInfo | None = Field(None, description="Nutrient information")
    match_score: float = Field(
        0.0, ge=0.0, le=1.0, description="How well the search matched (0-1)"
    )
    search_query: str = Field("", description="Original search query")
    provider: str = Field(..., description="Provider that generated this result")
    data_type: str | None = Field(
        None, description="USDA data type: 'Foundation', 'SR Legacy', etc."
    )


class NutritionLookupError(Exception):
    """Error during nutrition lookup."""

    def __init__(
        self,
        message: str,
        error_code: str = "LOOKUP_ERROR",
        provider: str = "unknown",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.provider = provider
        self.details = details or {}


class NutritionLookupService(ABC):
    """
    Abstract base class for nutrition lookup services.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        ...

    @abstractmethod
    async def search_food(self, query: str) -> NutritionResult:
        """
        Search for a food and return nutrition information for its best match.

        Args:
            query: Food name/description to search for

        Returns:
            NutritionResult (``found=False`` when nothing matched)

        Raises:
            NutritionLookupError: If the lookup itself fails
        """
        ...
