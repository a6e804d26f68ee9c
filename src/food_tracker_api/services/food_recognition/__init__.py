"""
Food Recognition Service - Facade pattern for food identification models.

Provides an abstraction layer for image recognition and text-only macro
estimation, with a LangChain chat model as the initial provider.
"""

from .base import (
    FoodRecognitionService,
    RecognitionError,
    UpstreamErrorKind,
    classify_error_message,
)
from .factory import get_food_recognition_service
from .llm_provider import LLMFoodRecognition, classify_exception

__all__ = [
    "FoodRecognitionService",
    "RecognitionError",
    "UpstreamErrorKind",
    "classify_error_message",
    "classify_exception",
    "get_food_recognition_service",
    "LLMFoodRecognition",
]
