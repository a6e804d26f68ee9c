"""API routes."""

from . import analysis, pattern_summary, suggestions

__all__ = ["analysis", "pattern_summary", "suggestions"]
