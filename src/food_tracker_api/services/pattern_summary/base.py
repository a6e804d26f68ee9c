"""
Base classes for the pattern summary service.
"""

from abc import ABC, abstractmethod
from typing import Any

from food_tracker_api.models.meals import MealRecord, PatternSummary


class PatternSummaryError(Exception):
    """Error while generating a pattern summary."""

    def __init__(
        self,
        message: str,
        error_code: str = "SUMMARY_ERROR",
        provider: str = "unknown",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.provider = provider
        self.details = details or {}


class PatternSummaryService(ABC):
    """
    Abstract base class for pattern summary services.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        ...

    @abstractmethod
    async def summarize(self, meals: list[MealRecord]) -> PatternSummary:
        """
        Describe the day's eating pattern.

        Args:
            meals: Non-empty list of today's logged food items

        Returns:
            PatternSummary with a title, bullets and one overall insight

        Raises:
            PatternSummaryError: If the summary cannot be produced
        """
        ...
