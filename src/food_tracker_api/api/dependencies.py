"""FastAPI dependency injection factories."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from food_tracker_api.core.config import Settings, get_settings
from food_tracker_api.pipeline.enrichment import EnrichmentOrchestrator
from food_tracker_api.pipeline.food_analysis import FoodAnalysisPipeline
from food_tracker_api.pipeline.pattern_summary import PatternSummaryPipeline
from food_tracker_api.pipeline.recognition import RecognitionClient
from food_tracker_api.services.food_recognition import (
    FoodRecognitionService,
    get_food_recognition_service,
)
from food_tracker_api.services.image_normalizer import ImageNormalizer
from food_tracker_api.services.nutrition_enhancement import (
    DatabaseNutritionEnhancer,
    NoOpNutritionEnhancer,
    NutritionEnhancementService,
)
from food_tracker_api.services.nutrition_lookup import get_nutrition_lookup_service
from food_tracker_api.services.pattern_summary import (
    PatternSummaryService,
    get_pattern_summary_service,
)
from food_tracker_api.services.suggestions import (
    NutritionSuggestionService,
    get_suggestion_service,
)


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache(maxsize=1)
def get_nutrition_enhancer() -> NutritionEnhancementService:
    """
    Get the nutrition enhancement service.

    Returns:
        Database-backed enhancer, or a pass-through when no database is configured
    """
    lookup = get_nutrition_lookup_service()
    if lookup is None:
        return NoOpNutritionEnhancer()
    return DatabaseNutritionEnhancer(lookup, get_settings().usda_min_match_score)


RecognitionServiceDep = Annotated[FoodRecognitionService, Depends(get_food_recognition_service)]
EnhancerDep = Annotated[NutritionEnhancementService, Depends(get_nutrition_enhancer)]
SummaryServiceDep = Annotated[PatternSummaryService, Depends(get_pattern_summary_service)]
SuggestionServiceDep = Annotated[NutritionSuggestionService, Depends(get_suggestion_service)]


def get_recognition_client(
    settings: SettingsDep, service: RecognitionServiceDep
) -> RecognitionClient:
    """
    Get RecognitionClient instance.

    Args:
        settings: Injected settings
        service: Injected recognition collaborator

    Returns:
        RecognitionClient with the configured inner timeouts
    """
    return RecognitionClient(
        service,
        timeout=settings.recognition_timeout,
        estimate_timeout=settings.macro_estimate_timeout,
    )


RecognitionClientDep = Annotated[RecognitionClient, Depends(get_recognition_client)]


def get_food_analysis_pipeline(
    settings: SettingsDep,
    recognition: RecognitionClientDep,
    enhancer: EnhancerDep,
) -> FoodAnalysisPipeline:
    """
    Get FoodAnalysisPipeline instance.

    Returns:
        Pipeline wired with the injected collaborators
    """
    return FoodAnalysisPipeline(
        normalizer=ImageNormalizer(
            max_dimension=settings.image_max_dimension,
            quality=settings.image_jpeg_quality,
        ),
        recognition=recognition,
        enrichment=EnrichmentOrchestrator(enhancer, timeout=settings.enrichment_timeout),
        timeout=settings.analysis_timeout,
    )


def get_pattern_summary_pipeline(
    settings: SettingsDep, service: SummaryServiceDep
) -> PatternSummaryPipeline:
    """Get PatternSummaryPipeline instance."""
    return PatternSummaryPipeline(service, timeout=settings.pattern_summary_timeout)


# Type aliases for pipeline dependencies
FoodAnalysisPipelineDep = Annotated[FoodAnalysisPipeline, Depends(get_food_analysis_pipeline)]
PatternSummaryPipelineDep = Annotated[
    PatternSummaryPipeline, Depends(get_pattern_summary_pipeline)
]
