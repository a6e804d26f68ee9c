"""Food analysis API routes.

Photo analysis and text-only macro estimation.
"""

import json
import logging

from fastapi import APIRouter, Request
from starlette.datastructures import UploadFile

from food_tracker_api.api.dependencies import (
    FoodAnalysisPipelineDep,
    RecognitionClientDep,
    SettingsDep,
)
from food_tracker_api.core.exceptions import APIError, ErrorCode
from food_tracker_api.models.analysis import (
    AnalysisRequest,
    AnalysisResponse,
    ErrorResponse,
    MacroEstimateResponse,
)
from food_tracker_api.pipeline.recognition import recognition_error_to_api
from food_tracker_api.services.food_recognition import RecognitionError

router = APIRouter(responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
logger = logging.getLogger(__name__)

# Some mobile clients send photos without a specific image type
GENERIC_UPLOAD_TYPES = {"application/octet-stream"}


def _is_image_type(content_type: str | None) -> bool:
    if not content_type:
        return True
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime.startswith("image/") or mime in GENERIC_UPLOAD_TYPES


@router.post("/analyze-food", response_model=AnalysisResponse)
async def analyze_food(
    request: Request,
    pipeline: FoodAnalysisPipelineDep,
    settings: SettingsDep,
) -> AnalysisResponse:
    """
    Analyze a food photo.

    Expects multipart/form-data with the image in the ``image`` field.
    Returns detected items with calories and macros, corrected from the
    nutrition database where a good match exists.
    """
    content_type = request.headers.get("content-type", "").lower()
    if "multipart/form-data" not in content_type:
        raise APIError(
            ErrorCode.INVALID_CONTENT_TYPE,
            "Request must be multipart/form-data with an 'image' field",
        )

    try:
        form = await request.form()
    except Exception as e:
        logger.warning(f"Failed to parse multipart body: {e}")
        raise APIError(ErrorCode.INVALID_MULTIPART, "Malformed multipart request body") from e

    upload = form.get("image")
    if not isinstance(upload, UploadFile):
        raise APIError(ErrorCode.NO_IMAGE, "Please include an image file in the 'image' field")

    if not _is_image_type(upload.content_type):
        logger.warning(f"Rejected upload {upload.filename} with type {upload.content_type}")
        raise APIError(
            ErrorCode.INVALID_FILE_TYPE,
            "Invalid file type. Allowed types: image files",
            details={"content_type": upload.content_type},
        )

    image_data = await upload.read()
    if len(image_data) > settings.max_image_size_bytes:
        raise APIError(
            ErrorCode.FILE_TOO_LARGE,
            f"Image exceeds maximum size of {settings.max_image_size_mb} MB",
            details={"size": len(image_data), "max_size": settings.max_image_size_bytes},
        )

    logger.info(
        f"Received image: {upload.filename} ({len(image_data)} bytes)",
        extra={"content_type": upload.content_type},
    )

    return await pipeline.run(
        AnalysisRequest(
            image_data=image_data,
            content_length=len(image_data),
            content_type=upload.content_type,
            filename=upload.filename,
        )
    )


@router.post("/estimate-macros", response_model=MacroEstimateResponse)
async def estimate_macros(
    request: Request,
    recognition: RecognitionClientDep,
) -> MacroEstimateResponse:
    """
    Estimate typical macros for a food described by name.

    Body: ``{"foodName": "Chipotle sofritas burrito"}``
    """
    try:
        body = json.loads(await request.body() or b"{}")
    except ValueError as e:
        logger.warning(f"Invalid JSON body: {e}")
        body = {}

    food_name = body.get("foodName") if isinstance(body, dict) else None
    if not isinstance(food_name, str) or not food_name.strip():
        raise APIError(ErrorCode.INVALID_FOOD_NAME, "Please provide a non-empty 'foodName'")

    try:
        estimate = await recognition.estimate_macros(food_name.strip())
    except RecognitionError as e:
        logger.error(f"Macro estimation failed ({e.kind.value}): {e.message}")
        raise recognition_error_to_api(
            e,
            timeout_code=ErrorCode.ESTIMATION_FAILED,
            fallback_code=ErrorCode.ESTIMATION_FAILED,
        ) from e

    return MacroEstimateResponse(estimate=estimate)
