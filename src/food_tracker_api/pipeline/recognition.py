"""Recognition client: inner timeouts and failure classification."""

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from food_tracker_api.core.exceptions import APIError, ErrorCode
from food_tracker_api.models.analysis import FoodAnalysis, MacroEstimate, NormalizedImage
from food_tracker_api.services.food_recognition import (
    FoodRecognitionService,
    RecognitionError,
    UpstreamErrorKind,
    classify_error_message,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecognitionClient:
    """
    Calls the recognition collaborator under its own timeouts.

    Every failure leaves as a ``RecognitionError`` with a classified kind.
    A single attempt is made per call.
    """

    def __init__(
        self,
        service: FoodRecognitionService,
        timeout: float = 80.0,
        estimate_timeout: float = 60.0,
    ):
        self.service = service
        self.timeout = timeout
        self.estimate_timeout = estimate_timeout

    async def recognize(self, image: NormalizedImage) -> FoodAnalysis:
        start_time = time.monotonic()
        analysis = await self._call("recognition", self.service.recognize(image), self.timeout)
        logger.info(
            f"Recognition returned {len(analysis.items)} items",
            extra={
                "provider": self.service.provider_name,
                "duration_ms": int((time.monotonic() - start_time) * 1000),
            },
        )
        return analysis

    async def estimate_macros(self, food_name: str) -> MacroEstimate:
        return await self._call(
            "macro estimate", self.service.estimate_macros(food_name), self.estimate_timeout
        )

    async def _call(self, label: str, coro: Awaitable[T], timeout: float) -> T:
        try:
            return await asyncio.wait_for(coro, timeout=timeout)
        except RecognitionError:
            raise
        except TimeoutError as e:
            logger.warning(f"{label} exceeded inner timeout of {timeout}s")
            raise RecognitionError(
                message=f"{label} timed out after {timeout}s",
                kind=UpstreamErrorKind.TIMEOUT,
                provider=self.service.provider_name,
            ) from e
        except Exception as e:
            # Adapter raised something untyped; classify on its text.
            kind = classify_error_message(str(e))
            logger.error(f"Unclassified {label} failure ({kind.value}): {e}")
            raise RecognitionError(
                message=str(e) or f"{label} failed",
                kind=kind,
                provider=self.service.provider_name,
            ) from e


def recognition_error_to_api(
    error: RecognitionError,
    *,
    timeout_code: ErrorCode,
    fallback_code: ErrorCode,
) -> APIError:
    """
    Map a classified recognition failure onto an endpoint's error codes.

    Args:
        error: Failure raised by the recognition client
        timeout_code: Code used when the upstream call timed out
        fallback_code: Endpoint's generic failure code
    """
    match error.kind:
        case UpstreamErrorKind.TIMEOUT:
            return APIError(timeout_code, "The recognition service timed out. Please try again.")
        case UpstreamErrorKind.RATE_LIMITED:
            return APIError(
                ErrorCode.RATE_LIMITED,
                "Too many requests to the recognition service. Please try again later.",
            )
        case UpstreamErrorKind.AUTH:
            return APIError(
                ErrorCode.API_KEY_ERROR,
                "The recognition service is not configured correctly.",
            )
        case _:
            return APIError(fallback_code, error.message)
