"""
Base classes for the food recognition service.

Defines the abstract interface that all providers must implement, plus the
structured failure classification shared by every provider.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from food_tracker_api.models.analysis import FoodAnalysis, MacroEstimate, NormalizedImage


class UpstreamErrorKind(str, Enum):
    """Classified failure of an upstream model call."""

    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    AUTH = "auth"
    UNAVAILABLE = "unavailable"


class RecognitionError(Exception):
    """Error during food recognition or macro estimation."""

    def __init__(
        self,
        message: str,
        kind: UpstreamErrorKind = UpstreamErrorKind.UNAVAILABLE,
        provider: str = "unknown",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.provider = provider
        self.details = details or {}

    def __repr__(self) -> str:
        return f"RecognitionError(kind={self.kind.value!r}, message={self.message!r})"


# Last-resort mapping for providers that only report free text.
# Checked in order; the first matching kind wins.
_MESSAGE_MARKERS: list[tuple[UpstreamErrorKind, tuple[str, ...]]] = [
    (UpstreamErrorKind.TIMEOUT, ("timed out", "timeout", "deadline exceeded")),
    (UpstreamErrorKind.RATE_LIMITED, ("rate limit", "too many requests", "quota", "resource exhausted")),
    (UpstreamErrorKind.AUTH, ("api key", "unauthorized", "authentication", "permission denied")),
]


def classify_error_message(message: str) -> UpstreamErrorKind:
    """
    Classify a provider failure from its message text.

    Only for adapters that have no structured error information.
    """
    lowered = message.lower()
    for kind, markers in _MESSAGE_MARKERS:
        if any(marker in lowered for marker in markers):
            return kind
    return UpstreamErrorKind.UNAVAILABLE


class FoodRecognitionService(ABC):
    """
    Abstract base class for food recognition services.

    Implementations raise ``RecognitionError`` with a classified ``kind``
    for every failure.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        ...

    @abstractmethod
    async def recognize(self, image: NormalizedImage) -> FoodAnalysis:
        """
        Recognize foods in a normalized image.

        Args:
            image: Normalized JPEG with its base64 transport encoding

        Returns:
            FoodAnalysis with every detected item

        Raises:
            RecognitionError: If recognition fails
        """
        ...

    @abstractmethod
    async def estimate_macros(self, food_name: str) -> MacroEstimate:
        """
        Estimate typical macros for a food described by name only.

        Raises:
            RecognitionError: If estimation fails
        """
        ...
