"""Pydantic models for the food analysis API contract.

Defines the recognition result shared by the recognition, enrichment and
response-assembly stages, plus the request/response envelopes for
``/api/analyze-food`` and ``/api/estimate-macros``.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, ConfigDict, Field

from food_tracker_api.models.base import CamelModel

# =============================================================================
# Enums
# =============================================================================


class PortionSize(str, Enum):
    """Visual portion size bucket."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class MacroGuess(str, Enum):
    """Dominant macronutrient by appearance."""

    CARB_HEAVY = "carb-heavy"
    PROTEIN_RICH = "protein-rich"
    FAT_HEAVY = "fat-heavy"
    BALANCED = "balanced"


class NutritionSource(str, Enum):
    """Where an item's macro values came from."""

    AI_ESTIMATE = "ai_estimate"
    USDA = "usda"


# =============================================================================
# Pipeline values
# =============================================================================


@dataclass(frozen=True)
class AnalysisRequest:
    """An uploaded image, alive for one pipeline invocation."""

    image_data: bytes
    content_length: int
    content_type: str | None = None
    filename: str | None = None


@dataclass(frozen=True)
class NormalizedImage:
    """Re-encoded JPEG ready for the recognition service."""

    data: bytes
    width: int
    height: int
    mime_type: str = "image/jpeg"
    source_size: int = field(default=0, compare=False)

    @property
    def base64(self) -> str:
        """Text-safe transport encoding."""
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


# =============================================================================
# Recognition / enrichment models
# =============================================================================


class FoodItem(CamelModel):
    """A single food item detected in the image."""

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(None, description="Item identifier")
    name: str = Field(..., description="Specific food name")
    serving_size: str = Field("Unknown", description="Serving size description")
    estimated_grams: float | None = Field(None, ge=0, description="Estimated weight in grams")
    calories: float = Field(0, ge=0, description="Energy in kcal for the visible portion")
    protein: float = Field(0, ge=0, description="Protein in grams")
    carbs: float = Field(
        0,
        ge=0,
        validation_alias=AliasChoices("carbs", "carbohydrate"),
        description="Carbohydrates in grams",
    )
    fat: float = Field(0, ge=0, description="Fat in grams")
    fiber: float = Field(0, ge=0, description="Fiber in grams")
    confidence: float = Field(0.5, ge=0.0, le=1.0, description="Confidence score 0-1")
    cooking_method: str | None = Field(None, description="Apparent preparation method")
    ingredients: list[str] = Field(default_factory=list, description="Main ingredients")
    portion_size: PortionSize = Field(PortionSize.MEDIUM, description="Portion size bucket")
    macro_guess: MacroGuess = Field(MacroGuess.BALANCED, description="Dominant macro by appearance")

    # Set only by the enrichment stage
    nutrition_source: NutritionSource | None = Field(
        None, description="Source of the macro values when enriched"
    )
    database_match: str | None = Field(
        None, description="Matched nutrition database entry"
    )


class FoodAnalysis(CamelModel):
    """Complete recognition result, optionally enriched."""

    model_config = ConfigDict(frozen=True)

    items: list[FoodItem] = Field(default_factory=list, description="Detected food items")
    overall_confidence: float = Field(
        ge=0.0, le=1.0, description="Overall confidence in recognition"
    )
    image_description: str | None = Field(None, description="What the model saw")
    suggestions: list[str] = Field(default_factory=list, description="Photo tips")
    provider: str = Field("unknown", description="Provider that generated this result")

    @property
    def total_calories(self) -> float:
        return sum(item.calories for item in self.items)


class MacroEstimate(CamelModel):
    """Text-only macro estimate for a named food."""

    name: str
    calories: float = 0
    protein: float = 0
    carbs: float = Field(0, validation_alias=AliasChoices("carbs", "carbohydrate"))
    fat: float = 0
    fiber: float = 0
    sugar: float = 0
    sodium: float = 0
    serving_size: str = "1 serving"
    confidence: float = Field(0.7, ge=0.0, le=1.0)


# =============================================================================
# Response envelopes
# =============================================================================


class AnalysisResponse(CamelModel):
    """Success envelope for /api/analyze-food."""

    success: bool = True
    analysis_id: str = Field(..., description="Opaque unique analysis token")
    timestamp: datetime = Field(..., description="When the analysis completed")
    analysis: FoodAnalysis


class MacroEstimateResponse(CamelModel):
    """Success envelope for /api/estimate-macros."""

    success: bool = True
    estimate: MacroEstimate


class ErrorResponse(CamelModel):
    """Error envelope shared by every endpoint."""

    success: bool = False
    error: str
    code: str
    message: str
    details: dict | None = None
