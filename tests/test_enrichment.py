"""Tests for nutrition enrichment: the orchestrator, the enhancer and USDA lookup."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from food_tracker_api.models.analysis import FoodAnalysis, FoodItem, NutritionSource
from food_tracker_api.pipeline.enrichment import EnrichmentOrchestrator
from food_tracker_api.services.nutrition_enhancement import (
    DatabaseNutritionEnhancer,
    NutritionEnhancementError,
)
from food_tracker_api.services.nutrition_lookup import (
    NutrientInfo,
    NutritionLookupError,
    NutritionResult,
    USDANutritionLookup,
)
from tests.conftest import StubEnhancer, correct_banana_fat


class TestEnrichmentOrchestrator:
    """Tests for EnrichmentOrchestrator."""

    @pytest.mark.asyncio
    async def test_returns_enriched_analysis(self, banana_analysis):
        orchestrator = EnrichmentOrchestrator(StubEnhancer(transform=correct_banana_fat))

        enriched = await orchestrator.enrich(banana_analysis)

        assert enriched.items[0].fat == 0.3
        assert enriched.items[0].nutrition_source == NutritionSource.USDA

    @pytest.mark.asyncio
    async def test_failure_returns_original_object(self, banana_analysis):
        orchestrator = EnrichmentOrchestrator(StubEnhancer(error=RuntimeError("db down")))

        assert await orchestrator.enrich(banana_analysis) is banana_analysis

    @pytest.mark.asyncio
    async def test_timeout_returns_original_object(self, banana_analysis):
        orchestrator = EnrichmentOrchestrator(StubEnhancer(delay=1.0), timeout=0.05)

        assert await orchestrator.enrich(banana_analysis) is banana_analysis

    @pytest.mark.asyncio
    async def test_dropped_items_return_original(self, banana_analysis):
        orchestrator = EnrichmentOrchestrator(
            StubEnhancer(transform=lambda a: a.model_copy(update={"items": []}))
        )

        assert await orchestrator.enrich(banana_analysis) is banana_analysis

    @pytest.mark.asyncio
    async def test_reordered_items_return_original(self, banana_analysis):
        toast = FoodItem(id="food_test_1", name="toast", calories=80)
        analysis = banana_analysis.model_copy(update={"items": [*banana_analysis.items, toast]})
        orchestrator = EnrichmentOrchestrator(
            StubEnhancer(
                transform=lambda a: a.model_copy(update={"items": list(reversed(a.items))})
            )
        )

        assert await orchestrator.enrich(analysis) is analysis


class TestDatabaseNutritionEnhancer:
    """Tests for DatabaseNutritionEnhancer."""

    @staticmethod
    def _lookup(result: NutritionResult | None = None, error: Exception | None = None):
        lookup = MagicMock()
        lookup.provider_name = "usda"
        lookup.search_food = AsyncMock(return_value=result, side_effect=error)
        return lookup

    @staticmethod
    def _banana_result(match_score: float = 0.9) -> NutritionResult:
        return NutritionResult(
            found=True,
            food_id="173944",
            food_name="Bananas, raw",
            nutrients=NutrientInfo(
                calories=89, protein=1.09, carbs=22.84, fat=0.25, fiber=2.6, serving_size_g=100
            ),
            match_score=match_score,
            search_query="banana",
            provider="usda",
        )

    @pytest.fixture
    def analysis(self) -> FoodAnalysis:
        return FoodAnalysis(
            items=[
                FoodItem(
                    id="food_test_0",
                    name="banana",
                    estimated_grams=120,
                    calories=105,
                    protein=1.3,
                    carbs=27,
                    fat=0.4,
                    confidence=0.9,
                )
            ],
            overall_confidence=0.9,
        )

    @pytest.mark.asyncio
    async def test_scales_database_values_to_portion(self, analysis):
        enhancer = DatabaseNutritionEnhancer(self._lookup(self._banana_result()))

        enriched = await enhancer.enrich(analysis)

        item = enriched.items[0]
        assert item.fat == 0.3
        assert item.protein == 1.3
        assert item.carbs == 27.4
        assert item.calories == 107
        assert item.nutrition_source == NutritionSource.USDA
        assert item.database_match == "Bananas, raw"
        assert item.id == "food_test_0"

    @pytest.mark.asyncio
    async def test_weak_match_keeps_ai_estimate(self, analysis):
        enhancer = DatabaseNutritionEnhancer(
            self._lookup(self._banana_result(match_score=0.2)), min_match_score=0.5
        )

        enriched = await enhancer.enrich(analysis)

        assert enriched.items[0] == analysis.items[0]

    @pytest.mark.asyncio
    async def test_item_without_weight_keeps_ai_estimate(self, analysis):
        weightless = analysis.model_copy(
            update={"items": [analysis.items[0].model_copy(update={"estimated_grams": None})]}
        )
        enhancer = DatabaseNutritionEnhancer(self._lookup(self._banana_result()))

        enriched = await enhancer.enrich(weightless)

        assert enriched.items[0].fat == 0.4
        assert enriched.items[0].nutrition_source is None

    @pytest.mark.asyncio
    async def test_lookup_error_raises_enhancement_error(self, analysis):
        enhancer = DatabaseNutritionEnhancer(
            self._lookup(error=NutritionLookupError("USDA API error: 503", error_code="API_ERROR"))
        )

        with pytest.raises(NutritionEnhancementError) as exc_info:
            await enhancer.enrich(analysis)

        assert exc_info.value.error_code == "API_ERROR"

    @pytest.mark.asyncio
    async def test_failed_lookup_keeps_only_that_item(self, analysis):
        toast = FoodItem(id="food_test_1", name="toast", estimated_grams=30, calories=80, fat=1.0)
        two_items = analysis.model_copy(update={"items": [analysis.items[0], toast]})

        async def search_food(name: str) -> NutritionResult:
            if name == "toast":
                raise NutritionLookupError("USDA API error: 503", error_code="API_ERROR")
            return self._banana_result()

        lookup = self._lookup()
        lookup.search_food = AsyncMock(side_effect=search_food)
        enhancer = DatabaseNutritionEnhancer(lookup)

        enriched = await enhancer.enrich(two_items)

        assert [item.id for item in enriched.items] == ["food_test_0", "food_test_1"]
        assert enriched.items[0].nutrition_source == NutritionSource.USDA
        assert enriched.items[0].fat == 0.3
        assert enriched.items[1] == toast


class TestUSDANutritionLookup:
    """Tests for USDANutritionLookup."""

    @pytest.fixture
    def lookup(self):
        return USDANutritionLookup(api_key="test-key", timeout=5.0)

    @pytest.mark.asyncio
    async def test_search_food_parses_best_match(self, lookup):
        mock_response = {
            "foods": [
                {
                    "fdcId": 173944,
                    "description": "Bananas, raw",
                    "dataType": "SR Legacy",
                    "score": 850.0,
                    "foodNutrients": [
                        {"nutrientId": 1008, "value": 89},
                        {"nutrientId": 1003, "value": 1.09},
                        {"nutrientId": 1004, "value": 0.33},
                        {"nutrientId": 1005, "value": 22.84},
                        {"nutrientId": 1079, "value": 2.6},
                        {"nutrientId": 2000, "value": 12.2},
                    ],
                }
            ]
        }

        with patch.object(lookup, "_get_client") as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(
                return_value=MagicMock(status_code=200, json=lambda: mock_response)
            )
            mock_get_client.return_value = mock_http_client

            result = await lookup.search_food("banana")

        assert result.found is True
        assert result.food_id == "173944"
        assert result.food_name == "Bananas, raw"
        assert result.match_score == 0.85
        assert result.nutrients.fat == 0.33
        assert result.nutrients.calories == 89

    @pytest.mark.asyncio
    async def test_search_food_no_results(self, lookup):
        with patch.object(lookup, "_get_client") as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(
                return_value=MagicMock(status_code=200, json=lambda: {"foods": []})
            )
            mock_get_client.return_value = mock_http_client

            result = await lookup.search_food("unobtainium")

        assert result.found is False
        assert result.nutrients is None

    @pytest.mark.asyncio
    async def test_search_food_api_error(self, lookup):
        with patch.object(lookup, "_get_client") as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(return_value=MagicMock(status_code=503))
            mock_get_client.return_value = mock_http_client

            with pytest.raises(NutritionLookupError) as exc_info:
                await lookup.search_food("banana")

        assert exc_info.value.error_code == "API_ERROR"

    @pytest.mark.asyncio
    async def test_search_food_connection_error(self, lookup):
        with patch.object(lookup, "_get_client") as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))
            mock_get_client.return_value = mock_http_client

            with pytest.raises(NutritionLookupError) as exc_info:
                await lookup.search_food("banana")

        assert exc_info.value.error_code == "CONNECTION_ERROR"

    @pytest.mark.asyncio
    async def test_search_food_invalid_json(self, lookup):
        def bad_json():
            raise ValueError("Expecting value: line 1 column 1 (char 0)")

        with patch.object(lookup, "_get_client") as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.get = AsyncMock(
                return_value=MagicMock(status_code=200, json=bad_json)
            )
            mock_get_client.return_value = mock_http_client

            with pytest.raises(NutritionLookupError) as exc_info:
                await lookup.search_food("banana")

        assert exc_info.value.error_code == "INVALID_RESPONSE"
