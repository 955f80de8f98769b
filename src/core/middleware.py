"""
Request tracing for the storefront API.

Every request gets a short request id (or keeps the one the storefront
sent in X-Request-ID), which is bound to the structlog context so that
order, checkout and admin logs can be correlated.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"

# Polled by the load balancer; logged at debug
PROBE_PATHS = frozenset({"/health", "/ready", "/live"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Binds request_id/method/path for the request and logs its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        path = request.url.path
        bind_context(request_id=request_id, method=request.method, path=path)

        log = logger.debug if path in PROBE_PATHS else logger.info
        started = time.perf_counter()
        log("Request started", query=str(request.query_params) or None)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
            )
            clear_context()
            raise

        duration_ms = _elapsed_ms(started)
        log("Request completed", status_code=response.status_code, duration_ms=duration_ms)
        clear_context()
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[RESPONSE_TIME_HEADER] = f"{duration_ms:.2f}ms"
        return response
