"""
Logging Middleware for Request/Response Logging

This middleware logs all HTTP requests and responses for observability.
It captures:
- Request method and path
- Response status code
- Request processing time
- Socket peer address and any forwarded client address

Design Decisions:
- Uses Starlette's BaseHTTPMiddleware for compatibility
- Logs to standard Python logging (configured by main.run)
- Address resolution is shared with the endpoints: the peer keys the rate
  limiter, the forwarded address goes into visit records
"""

import time
import logging

from fastapi import Request

from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("visit_tracker")


def get_peer_ip(request: Request) -> str:
    """
    Return the transport-level peer address, ignoring forwarding headers.

    Rate limiting keys on this address.
    """
    return request.client.host if request.client else "unknown"


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers by checking X-Forwarded-For header.
    This is the address stored in visit records.

    Args:
        request: FastAPI Request object

    Returns:
        IP address as string
    """
    # Check for forwarded IP (from proxy/load balancer)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    return get_peer_ip(request)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    Each line carries the socket peer and, when it differs, the forwarded
    address that visit records will store for the same request.
    """

    async def dispatch(self, request: Request, call_next):
        peer_ip = get_peer_ip(request)
        client_ip = get_client_ip(request)

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        # Format: METHOD PATH STATUS_CODE PROCESS_TIME_MS PEER [FORWARDED]
        line = (
            f"{request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"peer:{peer_ip}"
        )
        if client_ip != peer_ip:
            line += f" forwarded:{client_ip}"

        if response.status_code == 429:
            logger.warning(line)
        else:
            logger.info(line)

        response.headers["X-Process-Time"] = str(process_time)

        return response


def add_logging_middleware(app):
    """
    Add logging middleware to FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(LoggingMiddleware)
