"""Custom exception classes for the API.

Every failure that reaches the transport layer is an ``APIError`` carrying a
stable ``ErrorCode``. The HTTP status and short title are looked up from
``ERROR_TABLE`` so that a code always maps to the same response.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable, client-facing error codes."""

    # Image analysis
    INVALID_CONTENT_TYPE = "INVALID_CONTENT_TYPE"
    INVALID_MULTIPART = "INVALID_MULTIPART"
    NO_IMAGE = "NO_IMAGE"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_IMAGE = "INVALID_IMAGE"
    IMAGE_CONVERSION_FAILED = "IMAGE_CONVERSION_FAILED"
    ANALYSIS_TIMEOUT = "ANALYSIS_TIMEOUT"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"

    # Shared upstream classifications
    RATE_LIMITED = "RATE_LIMITED"
    API_KEY_ERROR = "API_KEY_ERROR"

    # Pattern summary
    INVALID_MEALS_DATA = "INVALID_MEALS_DATA"
    NO_MEALS = "NO_MEALS"
    PATTERN_SUMMARY_TIMEOUT = "PATTERN_SUMMARY_TIMEOUT"
    PATTERN_SUMMARY_FAILED = "PATTERN_SUMMARY_FAILED"

    # Macro estimation
    INVALID_FOOD_NAME = "INVALID_FOOD_NAME"
    ESTIMATION_FAILED = "ESTIMATION_FAILED"

    # Nutrition suggestions
    INVALID_FOOD_ITEMS = "INVALID_FOOD_ITEMS"
    SUGGESTIONS_FAILED = "SUGGESTIONS_FAILED"

    # Generic
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# code -> (HTTP status, short error title)
ERROR_TABLE: dict[ErrorCode, tuple[int, str]] = {
    ErrorCode.INVALID_CONTENT_TYPE: (400, "Invalid Content-Type. Expected multipart/form-data"),
    ErrorCode.INVALID_MULTIPART: (400, "Invalid request format"),
    ErrorCode.NO_IMAGE: (400, "No image provided"),
    ErrorCode.INVALID_FILE_TYPE: (400, "Invalid file type"),
    ErrorCode.FILE_TOO_LARGE: (400, "File too large"),
    ErrorCode.INVALID_IMAGE: (400, "Invalid image file"),
    ErrorCode.IMAGE_CONVERSION_FAILED: (500, "Image processing failed"),
    ErrorCode.ANALYSIS_TIMEOUT: (504, "Request timeout"),
    ErrorCode.ANALYSIS_FAILED: (500, "Internal server error"),
    ErrorCode.RATE_LIMITED: (429, "Rate limit exceeded"),
    ErrorCode.API_KEY_ERROR: (500, "Server configuration error"),
    ErrorCode.INVALID_MEALS_DATA: (400, "Invalid meals data provided"),
    ErrorCode.NO_MEALS: (400, "No meals provided"),
    ErrorCode.PATTERN_SUMMARY_TIMEOUT: (504, "Request timeout"),
    ErrorCode.PATTERN_SUMMARY_FAILED: (500, "Failed to generate pattern summary"),
    ErrorCode.INVALID_FOOD_NAME: (400, "Food name is required"),
    ErrorCode.ESTIMATION_FAILED: (500, "Failed to estimate macros"),
    ErrorCode.INVALID_FOOD_ITEMS: (400, "Invalid food items provided"),
    ErrorCode.SUGGESTIONS_FAILED: (500, "Failed to generate suggestions"),
    ErrorCode.NOT_FOUND: (404, "Endpoint not found"),
    ErrorCode.UNKNOWN_ERROR: (500, "Internal server error"),
}


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, code: ErrorCode, message: str, details: Any = None):
        self.code = code
        self.message = message
        self.details = details
        self.status_code, self.error = ERROR_TABLE[code]
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        """Render the JSON error envelope."""
        content: dict[str, Any] = {
            "success": False,
            "error": self.error,
            "code": self.code.value,
            "message": self.message,
        }
        if self.details is not None:
            content["details"] = self.details
        return content

    def __repr__(self) -> str:
        return f"APIError(code={self.code.value!r}, message={self.message!r})"
