"""
USDA FoodData Central provider for nutrition lookup.

API Documentation: https://fdc.nal.usda.gov/api-guide.html
"""

import logging
from typing import Any

import httpx

from .base import (
    NutrientInfo,
    NutritionLookupError,
    NutritionLookupService,
    NutritionResult,
)

logger = logging.getLogger(__name__)


# USDA nutrient IDs for macros we care about
NUTRIENT_IDS = {
    1008: "calories",  # Energy (kcal)
    1003: "protein",  # Protein
    1004: "fat",  # Total lipid (fat)
    1005: "carbs",  # Carbohydrate, by difference
    1079: "fiber",  # Fiber, total dietary
}


class USDANutritionLookup(NutritionLookupService):
    """
    Nutrition lookup using USDA FoodData Central API.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.nal.usda.gov/fdc/v1",
        timeout: float = 10.0,
    ):
        """
        Initialize USDA provider.

        Args:
            api_key: USDA FoodData Central API key
            base_url: API base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def provider_name(self) -> str:
        return "usda"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
            )
        return self._client

    async def search_food(self, query: str) -> NutritionResult:
        """
        Search USDA FoodData Central for a food.

        Prefers Foundation and SR Legacy data types; values are per 100g.
        """
        client = await self._get_client()
        params = {
            "api_key": self.api_key,
            "query": query,
            "pageSize": 5,
            "dataType": ["Foundation", "SR Legacy", "Survey (FNDDS)"],
        }

        logger.debug(f"Searching USDA for: {query}")

        try:
            response = await client.get("/foods/search", params=params)
        except httpx.HTTPError as e:
            raise NutritionLookupError(
                message=f"Failed to connect to USDA API: {e}",
                error_code="CONNECTION_ERROR",
                provider=self.provider_name,
            ) from e

        if response.status_code != 200:
            raise NutritionLookupError(
                message=f"USDA API error: {response.status_code}",
                error_code="API_ERROR",
                provider=self.provider_name,
                details={"status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise NutritionLookupError(
                message=f"Invalid JSON from USDA API: {e}",
                error_code="INVALID_RESPONSE",
                provider=self.provider_name,
            ) from e

        foods = payload.get("foods", []) if isinstance(payload, dict) else []
        if not foods:
            logger.info(f"No USDA results for: {query}")
            return NutritionResult(found=False, provider=self.provider_name, search_query=query)

        best_match = foods[0]
        search_score = best_match.get("score", 0)
        # Normalize score (USDA scores vary widely)
        match_score = min(1.0, search_score / 1000) if search_score else 0.8

        return NutritionResult(
            found=True,
            food_id=str(best_match.get("fdcId")),
            food_name=best_match.get("description"),
            nutrients=self._parse_nutrients(best_match.get("foodNutrients", [])),
            match_score=match_score,
            search_query=query,
            provider=self.provider_name,
            data_type=best_match.get("dataType"),
        )

    def _parse_nutrients(self, nutrients: list[dict[str, Any]]) -> NutrientInfo:
        """Parse a search-format nutrients list into NutrientInfo."""
        values: dict[str, float] = {}

        for nutrient in nutrients:
            field = NUTRIENT_IDS.get(nutrient.get("nutrientId"))
            value = nutrient.get("value")
            if field is None or value is None:
                continue
            values[field] = float(value)

        return NutrientInfo(
            carbs=values.get("carbs", 0.0),
            protein=values.get("protein", 0.0),
            fat=values.get("fat", 0.0),
            fiber=values.get("fiber", 0.0),
            calories=values.get("calories"),
            serving_size_g=100.0,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
