"""
LLM vision provider for food recognition.

Sends the normalized image to a multimodal chat model through LangChain and
parses the JSON reply into a FoodAnalysis.
"""

import json
import logging
import time
from enum import Enum
from typing import Any
from uuid import uuid4

import httpx
import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from pydantic import ValidationError

from food_tracker_api.core.config import LLMProvider, Settings
from food_tracker_api.models.analysis import (
    FoodAnalysis,
    FoodItem,
    MacroEstimate,
    MacroGuess,
    NormalizedImage,
    PortionSize,
)
from food_tracker_api.services.llm import extract_json, get_llm, response_text

from .base import (
    FoodRecognitionService,
    RecognitionError,
    UpstreamErrorKind,
    classify_error_message,
)

logger = logging.getLogger(__name__)


FOOD_ANALYSIS_PROMPT = """Analyze this food image and estimate its nutrition.

Identify every food item visible, its portion, how it was prepared and its
nutritional content. For mixed dishes include every component: the base
(pasta, rice, noodles, bread) even when partly hidden, vegetables, proteins,
sauces and cooking fats. Estimate nutrition for the ENTIRE visible portion:
if you see 2 eggs, report both eggs combined.

For each food item provide:
- name: specific name including quantity when several are visible
  (e.g. "2 scrambled eggs", "pasta with broccoli")
- calories, protein, carbs, fat, fiber: for the whole visible portion
  (kcal and grams)
- serving_size: e.g. "1 cup of rice", "3 pancakes"
- estimated_grams: estimated weight of the portion in grams
- confidence: 0-1
- cooking_method: e.g. grilled, fried, raw
- ingredients: all main ingredients, including partly visible bases
- portion_size: "small", "medium" or "large"
- macro_guess: "carb-heavy", "protein-rich", "fat-heavy" or "balanced"

Respond ONLY with valid JSON in this format:
{
  "foods": [
    {
      "name": "string",
      "calories": number,
      "protein": number,
      "carbs": number,
      "fat": number,
      "fiber": number,
      "serving_size": "string",
      "estimated_grams": number,
      "confidence": number,
      "cooking_method": "string",
      "ingredients": ["string"],
      "portion_size": "small" | "medium" | "large",
      "macro_guess": "carb-heavy" | "protein-rich" | "fat-heavy" | "balanced"
    }
  ],
  "overall_confidence": number,
  "image_description": "string",
  "suggestions": ["string"]
}

If the image is too dark or unclear to identify any food, return an empty
"foods" array, overall_confidence 0.1, describe the problem in
image_description and give photo tips in suggestions. Never answer with
plain text."""


MACRO_ESTIMATE_PROMPT = """Estimate the typical nutritional information for this food item: "{food_name}"

Base the estimate on a standard serving and typical preparation. For
restaurant items use typical restaurant portions.

Respond ONLY with a JSON object:
{{
  "name": "{food_name}",
  "calories": number,
  "protein": number,
  "carbs": number,
  "fat": number,
  "fiber": number,
  "sugar": number,
  "sodium": number,
  "serving_size": "string describing typical serving",
  "confidence": number
}}

Grams for protein, carbs, fat, fiber and sugar; milligrams for sodium.
Confidence is 0.9+ for common foods and 0.7-0.8 for specific restaurant items."""


def classify_exception(exc: BaseException) -> UpstreamErrorKind:
    """Classify an SDK/transport exception raised by a chat model call."""
    if isinstance(exc, (TimeoutError, openai.APITimeoutError, httpx.TimeoutException)):
        return UpstreamErrorKind.TIMEOUT
    if isinstance(exc, openai.RateLimitError):
        return UpstreamErrorKind.RATE_LIMITED
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return UpstreamErrorKind.AUTH

    status_code = getattr(exc, "status_code", None)
    if status_code == 429:
        return UpstreamErrorKind.RATE_LIMITED
    if status_code in (401, 403):
        return UpstreamErrorKind.AUTH
    if status_code in (408, 504):
        return UpstreamErrorKind.TIMEOUT

    return classify_error_message(str(exc))


def _number(value: Any, default: float = 0.0) -> float:
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return default


def _confidence(value: Any, default: float) -> float:
    return min(1.0, _number(value, default))


def _enum_value(enum_cls: type[Enum], value: str, default: Enum) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return default


class LLMFoodRecognition(FoodRecognitionService):
    """
    Food recognition using a multimodal chat model.
    """

    def __init__(
        self,
        settings: Settings,
        llm: BaseChatModel | None = None,
        text_llm: BaseChatModel | None = None,
    ):
        """
        Initialize the provider.

        Args:
            settings: Application settings used to build models on first use
            llm: Vision model (built from settings when omitted)
            text_llm: Model for text-only estimates (defaults to ``llm``)
        """
        self.settings = settings
        self._llm = llm
        self._text_llm = text_llm or llm

    @property
    def provider_name(self) -> str:
        return f"{self.settings.llm_provider.value}/{self._model_name}"

    @property
    def _model_name(self) -> str:
        if self.settings.llm_provider == LLMProvider.GEMINI:
            return self.settings.gemini_model
        return self.settings.openai_model

    def _get_llm(self) -> BaseChatModel:
        """Get or create the vision model."""
        if self._llm is None:
            self._llm = self._build_llm(self.settings.recognition_timeout, max_tokens=1500)
        return self._llm

    def _get_text_llm(self) -> BaseChatModel:
        """Get or create the text model."""
        if self._text_llm is None:
            self._text_llm = self._build_llm(
                self.settings.macro_estimate_timeout, max_tokens=500, temperature=0.2
            )
        return self._text_llm

    def _build_llm(self, timeout: float, **kwargs: Any) -> BaseChatModel:
        try:
            return get_llm(self.settings, timeout=timeout, **kwargs)
        except ValueError as e:
            raise RecognitionError(
                message=str(e),
                kind=UpstreamErrorKind.AUTH,
                provider=self.provider_name,
            ) from e

    async def recognize(self, image: NormalizedImage) -> FoodAnalysis:
        """
        Recognize foods in an image using the vision model.
        """
        start_time = time.time()
        llm = self._get_llm()

        message = HumanMessage(
            content=[
                {"type": "text", "text": FOOD_ANALYSIS_PROMPT},
                {
                    "type": "image_url",
                    "image_url": {"url": image.data_url, "detail": "auto"},
                },
            ]
        )

        logger.info(
            f"Sending food recognition request ({self.provider_name})",
            extra={"image_kb": round(len(image.base64) / 1024)},
        )

        try:
            response = await llm.ainvoke([message])
        except Exception as e:
            kind = classify_exception(e)
            logger.error(f"Food recognition call failed ({kind.value}): {e}")
            raise RecognitionError(
                message=f"Recognition provider error: {e}",
                kind=kind,
                provider=self.provider_name,
            ) from e

        raw_response = response_text(response)
        analysis = self._parse_analysis(raw_response)

        logger.info(
            f"Parsed {len(analysis.items)} foods",
            extra={
                "provider": self.provider_name,
                "processing_time_ms": int((time.time() - start_time) * 1000),
                "confidence": analysis.overall_confidence,
            },
        )
        return analysis

    async def estimate_macros(self, food_name: str) -> MacroEstimate:
        """
        Estimate macros for a food described by name.
        """
        llm = self._get_text_llm()
        prompt = MACRO_ESTIMATE_PROMPT.format(food_name=food_name)

        try:
            response = await llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            kind = classify_exception(e)
            logger.error(f"Macro estimation call failed ({kind.value}): {e}")
            raise RecognitionError(
                message=f"Estimation provider error: {e}",
                kind=kind,
                provider=self.provider_name,
            ) from e

        raw_response = response_text(response)
        json_str = extract_json(raw_response)
        try:
            data = json.loads(json_str) if json_str else None
        except json.JSONDecodeError:
            data = None

        if not isinstance(data, dict):
            logger.warning(f"Unparseable macro estimate: {raw_response[:200]}")
            raise RecognitionError(
                message="Failed to parse macro estimate response",
                provider=self.provider_name,
            )

        return MacroEstimate(
            name=data.get("name") or food_name,
            calories=_number(data.get("calories")),
            protein=_number(data.get("protein")),
            carbs=_number(data.get("carbs")),
            fat=_number(data.get("fat")),
            fiber=_number(data.get("fiber")),
            sugar=_number(data.get("sugar")),
            sodium=_number(data.get("sodium")),
            serving_size=data.get("serving_size") or "1 serving",
            confidence=_confidence(data.get("confidence"), 0.7) or 0.7,
        )

    def _parse_analysis(self, raw_response: str) -> FoodAnalysis:
        """Parse the model reply; unusable replies become a placeholder result."""
        json_str = extract_json(raw_response)
        if not json_str:
            logger.warning("Could not extract JSON from recognition response")
            return self._unidentified()

        try:
            data = json.loads(json_str)
            foods = data.get("foods") or []
            batch = uuid4().hex[:8]
            items = [
                self._parse_item(food, f"food_{batch}_{index}")
                for index, food in enumerate(foods)
            ]
            return FoodAnalysis(
                items=items,
                overall_confidence=_confidence(data.get("overall_confidence"), 0.5),
                image_description=data.get("image_description"),
                suggestions=[str(s) for s in data.get("suggestions") or []],
                provider=self.provider_name,
            )
        except (json.JSONDecodeError, AttributeError, TypeError, ValidationError) as e:
            logger.warning(f"Failed to parse recognition response: {e}")
            logger.debug(f"Raw response: {raw_response[:500]}")
            return self._unidentified()

    def _parse_item(self, food: dict[str, Any], item_id: str) -> FoodItem:
        portion = str(food.get("portion_size") or "medium").lower()
        macro_guess = str(food.get("macro_guess") or "balanced").lower()
        grams = food.get("estimated_grams")

        return FoodItem(
            id=str(food.get("id") or item_id),
            name=str(food.get("name") or "Unknown Food"),
            serving_size=str(food.get("serving_size") or "Unknown"),
            estimated_grams=_number(grams) if grams else None,
            calories=_number(food.get("calories")),
            protein=_number(food.get("protein")),
            carbs=_number(food.get("carbs", food.get("carbohydrate"))),
            fat=_number(food.get("fat")),
            fiber=_number(food.get("fiber")),
            confidence=_confidence(food.get("confidence"), 0.5),
            cooking_method=food.get("cooking_method"),
            ingredients=[str(i) for i in food.get("ingredients") or [] if i],
            portion_size=_enum_value(PortionSize, portion, PortionSize.MEDIUM),
            macro_guess=_enum_value(MacroGuess, macro_guess, MacroGuess.BALANCED),
        )

    def _unidentified(self) -> FoodAnalysis:
        """Complete placeholder result for an unusable reply."""
        return FoodAnalysis(
            items=[
                FoodItem(
                    id=f"food_{uuid4().hex[:8]}_0",
                    name="Unidentified Food",
                    serving_size="Unknown",
                    confidence=0.1,
                    cooking_method="Unknown",
                )
            ],
            overall_confidence=0.1,
            image_description="Unable to analyze image",
            suggestions=["Try taking a clearer photo with better lighting"],
            provider=self.provider_name,
        )
