"""Image analysis pipeline: normalize, recognize, enrich, assemble."""

import asyncio
import logging
import time
from datetime import UTC, datetime
from uuid import uuid4

from food_tracker_api.core.exceptions import APIError, ErrorCode
from food_tracker_api.models.analysis import AnalysisRequest, AnalysisResponse, NormalizedImage
from food_tracker_api.services.food_recognition import RecognitionError
from food_tracker_api.services.image_normalizer import ImageNormalizationError, ImageNormalizer

from .deadline import DeadlineSupervisor
from .enrichment import EnrichmentOrchestrator
from .recognition import RecognitionClient, recognition_error_to_api

logger = logging.getLogger(__name__)


class FoodAnalysisPipeline:
    """
    Turns one uploaded image into exactly one AnalysisResponse or APIError.

    Stages run sequentially under a single deadline. The image is validated
    before any collaborator is called.
    """

    def __init__(
        self,
        normalizer: ImageNormalizer,
        recognition: RecognitionClient,
        enrichment: EnrichmentOrchestrator,
        timeout: float = 100.0,
    ):
        """
        Initialize the pipeline.

        Args:
            normalizer: Image codec applied before recognition
            recognition: Recognition client with its own inner timeout
            enrichment: Enrichment stage that never raises
            timeout: Outer budget for the whole invocation in seconds
        """
        self.normalizer = normalizer
        self.recognition = recognition
        self.enrichment = enrichment
        self.timeout = timeout

    async def run(self, request: AnalysisRequest) -> AnalysisResponse:
        """
        Analyze an uploaded image under the outer deadline.

        Raises:
            APIError: ANALYSIS_TIMEOUT when the budget elapses, otherwise the
                code of the failing stage
        """
        supervisor = DeadlineSupervisor(
            name="analysis",
            budget_seconds=self.timeout,
            on_timeout=lambda: APIError(
                ErrorCode.ANALYSIS_TIMEOUT,
                f"Image analysis did not complete within {self.timeout:g} seconds",
            ),
        )
        return await supervisor.run(lambda: self._analyze(request))

    async def _analyze(self, request: AnalysisRequest) -> AnalysisResponse:
        try:
            return await self._run_stages(request)
        except APIError:
            raise
        except Exception as e:
            logger.exception("Unexpected error during image analysis")
            raise APIError(ErrorCode.ANALYSIS_FAILED, "Failed to analyze food image") from e

    async def _run_stages(self, request: AnalysisRequest) -> AnalysisResponse:
        start_time = time.monotonic()
        image = await self._normalize(request)

        try:
            analysis = await self.recognition.recognize(image)
        except RecognitionError as e:
            logger.error(f"Recognition failed ({e.kind.value}): {e.message}")
            raise recognition_error_to_api(
                e,
                timeout_code=ErrorCode.ANALYSIS_TIMEOUT,
                fallback_code=ErrorCode.ANALYSIS_FAILED,
            ) from e

        enriched = await self.enrichment.enrich(analysis)

        response = AnalysisResponse(
            analysis_id=str(uuid4()),
            timestamp=datetime.now(UTC),
            analysis=enriched,
        )
        logger.info(
            f"Analysis {response.analysis_id} completed with {len(enriched.items)} items",
            extra={
                "analysis_id": response.analysis_id,
                "total_calories": enriched.total_calories,
                "duration_ms": int((time.monotonic() - start_time) * 1000),
            },
        )
        return response

    async def _normalize(self, request: AnalysisRequest) -> NormalizedImage:
        try:
            return await asyncio.to_thread(self.normalizer.normalize, request.image_data)
        except ImageNormalizationError as e:
            logger.warning(
                f"Image normalization failed: {e.message}",
                extra={"filename": request.filename, "size": request.content_length},
            )
            if e.invalid_input:
                raise APIError(
                    ErrorCode.INVALID_IMAGE,
                    "The uploaded file is not a valid image",
                ) from e
            raise APIError(
                ErrorCode.IMAGE_CONVERSION_FAILED,
                "Failed to process the uploaded image",
            ) from e
