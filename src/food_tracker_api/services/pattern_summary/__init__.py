"""
Pattern Summary Service - narrative summaries of a day's eating pattern.
"""

from .base import PatternSummaryError, PatternSummaryService
from .factory import get_pattern_summary_service
from .llm_provider import LLMPatternSummary
from .patterns import extract_patterns, format_meal_time

__all__ = [
    "LLMPatternSummary",
    "PatternSummaryError",
    "PatternSummaryService",
    "extract_patterns",
    "format_meal_time",
    "get_pattern_summary_service",
]
