"""Request context middleware for correlation IDs and request metrics."""

import time
import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from enrichment_tracker.api.errors import error_response
from enrichment_tracker.observability.logging import bind_context, clear_context, get_logger
from enrichment_tracker.observability.metrics import (
    api_request_duration_histogram,
    api_requests_total,
)

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = get_logger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get()


def _endpoint_label(request: Request) -> str:
    """Route template rather than the raw path, to keep label cardinality low."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request.

    The ID comes from ``X-Request-ID`` (or ``X-Correlation-ID``) when the
    client sends one and is generated otherwise. It is bound into structlog
    context for the duration of the request and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with context setup."""
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )

        token = request_id_var.set(request_id)
        bind_context(request_id=request_id)
        started = time.perf_counter()

        try:
            logger.info(
                "request_started",
                method=request.method,
                path=request.url.path,
                client=request.client.host if request.client else "unknown",
            )

            response = await call_next(request)

            duration = time.perf_counter() - started
            endpoint = _endpoint_label(request)
            labels = (request.method, endpoint, str(response.status_code))
            api_requests_total.labels(*labels).inc()
            api_request_duration_histogram.labels(*labels).observe(duration)

            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 1),
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration = time.perf_counter() - started
            labels = (request.method, _endpoint_label(request), "500")
            api_requests_total.labels(*labels).inc()
            api_request_duration_histogram.labels(*labels).observe(duration)

            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )

            response = error_response(
                500, "Internal server error", "An unexpected error occurred."
            )
            response.headers["X-Request-ID"] = request_id
            return response

        finally:
            request_id_var.reset(token)
            clear_context()
