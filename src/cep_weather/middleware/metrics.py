"""Request duration middleware."""

import logging
from time import perf_counter
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cep_weather.telemetry import MetricsRecorder

logger = logging.getLogger(__name__)


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """FastAPI middleware timing every request into a MetricsRecorder."""

    # Paths that are not timed
    BYPASS_PATHS = {
        "/health",
        "/metrics",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/favicon.ico",
    }

    def __init__(self, app, recorder: MetricsRecorder):
        """Initialize the metrics middleware.

        Args:
            app: FastAPI application instance
            recorder: Collaborator receiving the request durations
        """
        super().__init__(app)
        self.recorder = recorder

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Time the request and hand the duration to the recorder."""
        path = request.url.path
        if path in self.BYPASS_PATHS:
            return await call_next(request)

        start = perf_counter()
        try:
            return await call_next(request)
        finally:
            elapsed = perf_counter() - start
            try:
                self.recorder.observe_request(path, elapsed)
            except Exception as e:
                logger.error(f"Failed to record metrics for {path}: {e}")
