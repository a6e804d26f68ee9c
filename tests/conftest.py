"""Pytest configuration and fixtures."""

import asyncio
import io
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from food_tracker_api.api.dependencies import get_nutrition_enhancer
from food_tracker_api.core.config import Settings, get_settings
from food_tracker_api.main import app
from food_tracker_api.models.analysis import (
    FoodAnalysis,
    FoodItem,
    MacroEstimate,
    NormalizedImage,
    NutritionSource,
)
from food_tracker_api.models.meals import MealRecord, NutritionAdvice, PatternSummary
from food_tracker_api.services.food_recognition import (
    FoodRecognitionService,
    get_food_recognition_service,
)
from food_tracker_api.services.nutrition_enhancement import NutritionEnhancementService
from food_tracker_api.services.pattern_summary import (
    PatternSummaryService,
    get_pattern_summary_service,
)
from food_tracker_api.services.suggestions import (
    NutritionSuggestionService,
    get_suggestion_service,
)


# =============================================================================
# Stub collaborators
# =============================================================================


class StubRecognition(FoodRecognitionService):
    """Recognition collaborator with canned results and call counting."""

    def __init__(
        self,
        analysis: FoodAnalysis | None = None,
        estimate: MacroEstimate | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.analysis = analysis
        self.estimate = estimate
        self.error = error
        self.delay = delay
        self.recognize_calls = 0
        self.estimate_calls = 0

    @property
    def provider_name(self) -> str:
        return "stub"

    async def recognize(self, image: NormalizedImage) -> FoodAnalysis:
        self.recognize_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.analysis

    async def estimate_macros(self, food_name: str) -> MacroEstimate:
        self.estimate_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.estimate or MacroEstimate(name=food_name)


class StubEnhancer(NutritionEnhancementService):
    """Enhancement collaborator applying an optional transform."""

    def __init__(
        self,
        transform: Callable[[FoodAnalysis], Any] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.transform = transform
        self.error = error
        self.delay = delay
        self.calls = 0

    @property
    def provider_name(self) -> str:
        return "stub"

    async def enrich(self, analysis: FoodAnalysis) -> FoodAnalysis:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.transform(analysis) if self.transform else analysis


class StubSummary(PatternSummaryService):
    """Pattern summary collaborator with call counting."""

    def __init__(
        self,
        summary: PatternSummary | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.summary = summary or PatternSummary(
            bullets=["Your first food item was at 8:00 AM"],
            overall="Most of your calories came after noon.",
        )
        self.error = error
        self.delay = delay
        self.calls = 0
        self.received: list[MealRecord] | None = None

    @property
    def provider_name(self) -> str:
        return "stub"

    async def summarize(self, meals: list[MealRecord]) -> PatternSummary:
        self.calls += 1
        self.received = meals
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.summary


class StubSuggestions(NutritionSuggestionService):
    """Suggestion collaborator with call counting."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = 0

    async def suggest(self, food_items, user_goals) -> NutritionAdvice:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return NutritionAdvice(
            assessment="Solid protein intake",
            suggestions=["Add a serving of vegetables"],
            health_tips=["Stay hydrated"],
        )


def correct_banana_fat(analysis: FoodAnalysis) -> FoodAnalysis:
    """Enhancement that replaces the first item's fat with the database value."""
    first = analysis.items[0].model_copy(
        update={
            "fat": 0.3,
            "nutrition_source": NutritionSource.USDA,
            "database_match": "Bananas, raw",
        }
    )
    return analysis.model_copy(update={"items": [first, *analysis.items[1:]]})


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with short budgets and no external services."""
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        usda_enabled=False,
        analysis_timeout=2.0,
        recognition_timeout=1.0,
        enrichment_timeout=0.5,
        pattern_summary_timeout=2.0,
        summary_llm_timeout=1.0,
        deadline_safety_margin=0.1,
        max_image_size_mb=1,
    )


@pytest.fixture
def banana_analysis() -> FoodAnalysis:
    """Recognition result for a single banana."""
    return FoodAnalysis(
        items=[
            FoodItem(
                id="food_test_0",
                name="banana",
                serving_size="1 medium banana",
                estimated_grams=118,
                calories=105,
                protein=1.3,
                carbs=27,
                fat=0.4,
                confidence=0.9,
            )
        ],
        overall_confidence=0.9,
        image_description="A single banana on a plate",
        provider="stub",
    )


@pytest.fixture
def recognition(banana_analysis) -> StubRecognition:
    return StubRecognition(analysis=banana_analysis)


@pytest.fixture
def enhancer() -> StubEnhancer:
    return StubEnhancer(transform=correct_banana_fat)


@pytest.fixture
def summary_service() -> StubSummary:
    return StubSummary()


@pytest.fixture
def suggestion_service() -> StubSuggestions:
    return StubSuggestions()


def make_image_bytes(
    width: int = 1200, height: int = 800, fmt: str = "JPEG", mode: str = "RGB"
) -> bytes:
    """Encode a gradient test image in memory."""
    image = Image.linear_gradient("L").resize((width, height)).convert(mode)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
async def client(
    settings, recognition, enhancer, summary_service, suggestion_service
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async test client with stub collaborators.

    Usage:
        async def test_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_food_recognition_service] = lambda: recognition
    app.dependency_overrides[get_nutrition_enhancer] = lambda: enhancer
    app.dependency_overrides[get_pattern_summary_service] = lambda: summary_service
    app.dependency_overrides[get_suggestion_service] = lambda: suggestion_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
