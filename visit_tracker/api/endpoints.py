"""
FastAPI Endpoints for the Visit Tracker Service

This module defines all HTTP endpoints with minimal logic.
Endpoints only handle:
- Request parsing (Pydantic models)
- Rate limiting
- Error handling and HTTP responses
- Delegating to service layer

All business logic is in VisitLogService.

Design Principles:
- Thin endpoints: Only validation and rate limiting
- Service and limiter come from app.state through dependencies, so each
  application instance (and each test) has its own
- Error bodies use the same {status, message} shape as success bodies
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, JSONResponse

from visit_tracker.api.pages import HOME_PAGE
from visit_tracker.api.schemas import MuteRequest, StatusResponse, TrackResponse
from visit_tracker.core.exceptions import InvalidEntryError
from visit_tracker.core.rate_limit import FixedWindowLimiter
from visit_tracker.middleware.logging import get_client_ip, get_peer_ip
from visit_tracker.services.visit_log_service import VisitLogService

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"

router = APIRouter()


def get_visit_log_service(request: Request) -> VisitLogService:
    return request.app.state.visit_log_service


def get_rate_limiter(request: Request) -> FixedWindowLimiter:
    return request.app.state.rate_limiter


def enforce_track_limit(
    request: Request,
    limiter: FixedWindowLimiter = Depends(get_rate_limiter)
) -> None:
    """
    Count this call against the socket peer's /track quota.

    Runs before the endpoint body, so a rejected call never touches storage.
    RateLimitExceededError is turned into a 429 by the application handler.
    """
    limiter.hit(get_peer_ip(request))


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message}
    )


@router.get(
    "/",
    response_class=HTMLResponse,
    summary="Home page",
    description="Page whose script records a visit by calling /track"
)
async def home() -> HTMLResponse:
    return HTMLResponse(HOME_PAGE)


@router.get(
    "/track",
    response_model=TrackResponse,
    summary="Record a visit",
    description="Appends the caller's IP, user agent and the current time to the visit log",
    responses={429: {"model": StatusResponse}, 500: {"model": StatusResponse}},
    dependencies=[Depends(enforce_track_limit)]
)
async def track_visit(
    request: Request,
    service: VisitLogService = Depends(get_visit_log_service)
):
    """
    Record a visit from the caller.

    Returns:
        TrackResponse with the new size of the visit log

    Raises:
        HTTP 429: If the caller exceeded its quota (handled in main)
        HTTP 500: On any failure recording the visit, including StorageError
    """
    client_ip = get_client_ip(request)
    user_agent = request.headers.get("User-Agent")

    try:
        total = await service.track(client_ip, user_agent)
    except Exception as e:
        logger.error(f"Error tracking visit: {str(e)}", exc_info=True)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)

    return TrackResponse(total_visits=total)


@router.get(
    "/analytics-data",
    summary="Read the visit log",
    description="Returns every record in the visit log, or an empty list"
)
async def analytics_data(
    service: VisitLogService = Depends(get_visit_log_service)
) -> JSONResponse:
    # Records are passed through as stored, without per-item validation
    try:
        records = await service.get_analytics()
    except Exception as e:
        logger.error(f"Error reading analytics data: {str(e)}", exc_info=True)
        records = []
    return JSONResponse(content=records)


@router.post(
    "/mute-entry",
    response_model=StatusResponse,
    summary="Mute a visit",
    description="Moves visits matching ip and timestamp from the visit log to the muted log",
    responses={400: {"model": StatusResponse}, 500: {"model": StatusResponse}}
)
async def mute_entry(
    body: MuteRequest,
    service: VisitLogService = Depends(get_visit_log_service)
):
    """
    Mute a visit entry.

    Raises:
        HTTP 400: If ip or timestamp is missing
        HTTP 500: On any failure writing either log, including StorageError
    """
    try:
        await service.mute(body.ip, body.timestamp, body.user_agent)
    except InvalidEntryError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))
    except Exception as e:
        logger.error(f"Error muting entry: {str(e)}", exc_info=True)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)

    return StatusResponse(status="ok", message="Entry muted successfully")
