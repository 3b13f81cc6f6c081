"""
Logging Middleware for Request/Response Logging

This middleware logs all HTTP requests and responses for observability.
It captures:
- Request method and path
- Response status code
- Request processing time
- Client IP address
- Request ID (taken from X-Request-ID or generated)

The request ID is echoed back in the X-Request-ID response header so a
client report can be matched to the log line.
"""

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger("shortener.requests")


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers by checking X-Forwarded-For header.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded_for.split(",")[0].strip()

    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    It wraps the request/response cycle to add logging without
    modifying endpoint code.
    """

    async def dispatch(self, request: Request, call_next):
        client_ip = get_client_ip(request)
        request_id = request.headers.get(REQUEST_ID_HEADER) or f"req-{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            process_time = time.perf_counter() - start_time
            logger.exception(
                f"[{request_id}] {request.method} {request.url.path} "
                f"failed after {process_time*1000:.2f}ms IP:{client_ip}"
            )
            raise

        process_time = time.perf_counter() - start_time

        # Format: [REQUEST_ID] METHOD PATH STATUS_CODE PROCESS_TIME_MS CLIENT_IP
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"IP:{client_ip}"
        )

        response.headers["X-Process-Time"] = str(process_time)
        response.headers[REQUEST_ID_HEADER] = request_id

        return response


def add_logging_middleware(app):
    """
    Add logging middleware to FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(LoggingMiddleware)
