"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Exception handlers for rate limiting and malformed requests
- The visit log service and rate limiter shared by all requests

Design Decisions:
- Application factory: every app gets its own stores, service and limiter
- Module-level `app` for `uvicorn visit_tracker.main:app`
- run() is the console entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from visit_tracker.api import endpoints
from visit_tracker.core.exceptions import RateLimitExceededError
from visit_tracker.core.rate_limit import FixedWindowLimiter
from visit_tracker.core.setting import EnvSettingsOptions, Settings, settings
from visit_tracker.middleware.logging import add_logging_middleware
from visit_tracker.services.visit_log_service import VisitLogService
from visit_tracker.storage.json_file_store import JsonFileStore

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, slow down!"


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"status": "error", "message": RATE_LIMIT_MESSAGE}
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors, reported as 400."""
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "message": "Invalid request body"}
    )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a configured application.

    Args:
        app_settings: Settings to use instead of the environment-derived ones

    Returns:
        FastAPI application with its own stores, service and rate limiter
    """
    app_settings = app_settings or settings
    # Interactive API documentation is only served outside production
    is_production = app_settings.ENV_SETTING == EnvSettingsOptions.production

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Visit tracker started: "
            f"visits={app_settings.visits_path}, "
            f"muted={app_settings.muted_path}, "
            f"track_limit={app_settings.TRACK_RATE_LIMIT}, "
            f"env={app_settings.ENV_SETTING.value}"
        )
        yield
        logger.info("Visit tracker stopped")

    # Title and description are used in auto-generated API documentation
    app = FastAPI(
        title="Visit Tracker Service",
        description="Records visits and serves them back for analytics",
        version="1.0.0",
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.visit_log_service = VisitLogService(
        visits=JsonFileStore(app_settings.visits_path),
        muted=JsonFileStore(app_settings.muted_path),
    )
    app.state.rate_limiter = FixedWindowLimiter(app_settings.TRACK_RATE_LIMIT)

    app.add_exception_handler(RateLimitExceededError, rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint for monitoring.

        Returns:
            Health status of the service
        """
        return {"status": "healthy"}

    app.include_router(endpoints.router, tags=["Visit Tracker"])

    return app


app = create_app()


def run() -> None:
    """Start the HTTP server with the configured host and port."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logger.info(f"Server running at http://{settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
