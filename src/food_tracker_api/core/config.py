"""Application configuration using Pydantic Settings."""

from enum import Enum
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    GEMINI = "gemini"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM Provider Selection
    llm_provider: LLMProvider = LLMProvider.OPENAI

    # OpenAI Configuration
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # Google Gemini Configuration
    google_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # LLM Settings
    llm_temperature: float = 0.3

    # USDA FoodData Central
    usda_api_key: str = ""
    usda_api_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    usda_enabled: bool = True
    usda_min_match_score: float = 0.5  # Below this the LLM estimate is kept

    # Image normalization
    image_max_dimension: int = 768
    image_jpeg_quality: int = 80
    max_image_size_mb: int = 10

    # Time budgets (seconds). Outer budgets must cover their inner stages.
    analysis_timeout: float = 100.0
    recognition_timeout: float = 80.0
    enrichment_timeout: float = 10.0
    pattern_summary_timeout: float = 70.0
    summary_llm_timeout: float = 60.0
    macro_estimate_timeout: float = 60.0
    suggestions_timeout: float = 60.0
    deadline_safety_margin: float = 5.0

    # App
    debug: bool = False
    log_level: str = "INFO"
    app_name: str = "Food Tracker API"
    api_version: str = "1.0.0"
    cors_origins: list[str] = ["*"]

    @model_validator(mode="after")
    def check_time_budgets(self) -> "Settings":
        """Reject budgets where an inner timeout could outlive its deadline."""
        analysis_inner = (
            self.recognition_timeout
            + self.enrichment_timeout
            + self.deadline_safety_margin
        )
        if self.analysis_timeout <= analysis_inner:
            raise ValueError(
                f"analysis_timeout ({self.analysis_timeout}s) must exceed "
                f"recognition_timeout + enrichment_timeout + margin ({analysis_inner}s)"
            )

        summary_inner = self.summary_llm_timeout + self.deadline_safety_margin
        if self.pattern_summary_timeout <= summary_inner:
            raise ValueError(
                f"pattern_summary_timeout ({self.pattern_summary_timeout}s) must exceed "
                f"summary_llm_timeout + margin ({summary_inner}s)"
            )
        return self

    @property
    def is_llm_configured(self) -> bool:
        """Check if the selected LLM provider is configured."""
        if self.llm_provider == LLMProvider.OPENAI:
            return bool(self.openai_api_key)
        elif self.llm_provider == LLMProvider.GEMINI:
            return bool(self.google_api_key)
        return False

    @property
    def is_usda_configured(self) -> bool:
        """Check if USDA lookups can be made."""
        return self.usda_enabled and bool(self.usda_api_key)

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
