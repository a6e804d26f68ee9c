"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from food_tracker_api.api.routes import analysis, pattern_summary, suggestions
from food_tracker_api.core.config import get_settings
from food_tracker_api.core.exceptions import APIError, ErrorCode
from food_tracker_api.services.llm import get_llm_info
from food_tracker_api.services.nutrition_lookup import (
    USDANutritionLookup,
    get_nutrition_lookup_service,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.api_version}")
    if not settings.is_llm_configured:
        logger.warning(f"LLM provider '{settings.llm_provider.value}' has no API key configured")
    if not settings.is_usda_configured:
        logger.info("USDA enrichment disabled; AI estimates will be returned as-is")

    yield

    logger.info("Shutting down...")
    lookup = get_nutrition_lookup_service()
    if isinstance(lookup, USDANutritionLookup):
        await lookup.close()


def _error_response(error: APIError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_response())


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        description="Food photo analysis and daily eating pattern summaries",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Handle custom API errors."""
        return _error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Render framework HTTP errors in the API error envelope."""
        if exc.status_code == 404:
            return _error_response(
                APIError(ErrorCode.NOT_FOUND, f"Route {request.method} {request.url.path} not found")
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": str(exc.detail),
                "code": ErrorCode.UNKNOWN_ERROR.value,
                "message": str(exc.detail),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        """Last-resort handler for errors that escaped every stage."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(
            APIError(ErrorCode.UNKNOWN_ERROR, "An unexpected error occurred")
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.api_version,
            "llm": get_llm_info(settings),
            "usda": settings.is_usda_configured,
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": settings.app_name,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    # Include routers
    app.include_router(analysis.router, prefix="/api", tags=["Analysis"])
    app.include_router(pattern_summary.router, prefix="/api", tags=["Pattern Summary"])
    app.include_router(suggestions.router, prefix="/api", tags=["Suggestions"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "food_tracker_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
