"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from food_tracker_api.core.config import LLMProvider, Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults_are_consistent(self):
        settings = Settings(_env_file=None)

        assert settings.analysis_timeout == 100
        assert settings.recognition_timeout == 80
        assert settings.pattern_summary_timeout == 70
        assert settings.image_max_dimension == 768
        assert settings.image_jpeg_quality == 80

    def test_rejects_analysis_budget_smaller_than_stages(self):
        with pytest.raises(ValidationError, match="analysis_timeout"):
            Settings(_env_file=None, analysis_timeout=80, recognition_timeout=80)

    def test_rejects_summary_budget_smaller_than_model_timeout(self):
        with pytest.raises(ValidationError, match="pattern_summary_timeout"):
            Settings(_env_file=None, pattern_summary_timeout=60, summary_llm_timeout=60)

    def test_llm_configured_per_provider(self):
        openai_settings = Settings(_env_file=None, openai_api_key="sk-test")
        gemini_settings = Settings(
            _env_file=None, llm_provider=LLMProvider.GEMINI, openai_api_key="sk-test"
        )

        assert openai_settings.is_llm_configured is True
        assert gemini_settings.is_llm_configured is False

    def test_usda_requires_key_and_flag(self):
        assert Settings(_env_file=None, usda_api_key="key").is_usda_configured is True
        assert (
            Settings(_env_file=None, usda_api_key="key", usda_enabled=False).is_usda_configured
            is False
        )
        assert Settings(_env_file=None, usda_api_key="").is_usda_configured is False

    def test_max_image_size_bytes(self):
        assert Settings(_env_file=None, max_image_size_mb=2).max_image_size_bytes == 2 * 1024 * 1024
