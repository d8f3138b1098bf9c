"""
HTTP access logging for the quote API and the Telegram webhook.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")

# Polled by orchestrators; logged at debug only
HEALTH_CHECK_PATHS = frozenset({"/healthz"})


def _channel(path: str) -> str:
    if path.startswith("/telegram"):
        return "telegram"
    if path.startswith("/quotes"):
        return "api"
    return "other"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``http_request`` event per request with a correlation id."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        path = request.url.path

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, channel=_channel(path))

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
            if status_code >= 500:
                emit = logger.error
            elif status_code >= 400:
                emit = logger.warning
            elif path in HEALTH_CHECK_PATHS:
                emit = logger.debug
            else:
                emit = logger.info
            emit(
                "http_request",
                method=request.method,
                path=path,
                status=status_code,
                duration_ms=elapsed_ms,
            )
