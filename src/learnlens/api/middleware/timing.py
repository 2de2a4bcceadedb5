"""Timing middleware: adds ``X-Process-Time-Ms`` and records request metrics.

Manifesto:
    Server-side latency should be visible to every caller without extra
    instrumentation, and to the Prometheus export without log scraping.

Tags:
    learnlens, api, middleware, timing, latency, observability
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from learnlens.core.logging import get_logger
from learnlens.observability.metrics import MetricsRegistry, RequestMetrics

logger = get_logger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """Measure and expose request processing time in milliseconds."""

    def __init__(self, app: ASGIApp, registry: MetricsRegistry | None = None):
        super().__init__(app)
        self._metrics = RequestMetrics(registry) if registry is not None else None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers["X-Process-Time-Ms"] = str(elapsed_ms)

        if self._metrics is not None:
            self._metrics.record_request(request.url.path, response.status_code, elapsed_ms)
        logger.info(
            "api.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=elapsed_ms,
        )
        return response
