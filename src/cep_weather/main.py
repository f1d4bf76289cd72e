"""FastAPI applications for the gateway and orchestrator services."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Optional
import traceback

import httpx
import uvicorn
from fastapi import APIRouter, FastAPI, Response
from opentelemetry import trace
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from cep_weather.api.endpoints import router as orchestrator_router
from cep_weather.api.gateway import router as gateway_router
from cep_weather.config import (
    HOST, GATEWAY_PORT, ORCHESTRATOR_PORT, DEBUG, ORCHESTRATOR_URL,
    GATEWAY_SERVICE_NAME, ORCHESTRATOR_SERVICE_NAME
)
from cep_weather.logging_config import configure_logging
from cep_weather.middleware.metrics import RequestMetricsMiddleware
from cep_weather.telemetry import (
    MetricsRecorder, PrometheusMetrics, configure_tracing, shutdown_tracing
)

# Configure logging
configure_logging()
logger = logging.getLogger(__name__)


def _lifespan(service_name: str, setup_tracing: bool) -> Callable:
    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        try:
            if setup_tracing:
                configure_tracing(service_name)
            logger.info(f"Starting {service_name}")
            yield
        except Exception as e:
            logger.error(f"Startup error: {e}")
            logger.error(traceback.format_exc())
            raise
        finally:
            logger.info(f"Shutting down {service_name}")
            if setup_tracing:
                shutdown_tracing()

    return lifespan


def _build_app(
    service_name: str,
    title: str,
    description: str,
    router: APIRouter,
    tracer: Optional[trace.Tracer],
    metrics: Optional[MetricsRecorder],
    transport: Optional[httpx.AsyncBaseTransport]
) -> FastAPI:
    app = FastAPI(
        title=title,
        description=description,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        # An injected tracer means the caller owns the provider
        lifespan=_lifespan(service_name, setup_tracing=tracer is None)
    )

    # Collaborators read by the request handlers
    app.state.tracer = tracer or trace.get_tracer(service_name)
    app.state.metrics = metrics or PrometheusMetrics()
    app.state.transport = transport

    app.add_middleware(RequestMetricsMiddleware, recorder=app.state.metrics)

    app.include_router(router)

    # Prometheus exposition, only for recorders that own a registry
    registry = getattr(app.state.metrics, "registry", None)
    if registry is not None:
        @app.get("/metrics", include_in_schema=False)
        async def metrics_endpoint() -> Response:
            """Prometheus-compatible metrics."""
            return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return app


def create_orchestrator_app(
    tracer: Optional[trace.Tracer] = None,
    metrics: Optional[MetricsRecorder] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """Create the orchestrator (CEP -> city -> temperature) application.

    Args:
        tracer: Tracer for request spans (process provider if None)
        metrics: Request duration recorder (Prometheus if None)
        transport: Transport for outbound calls to ViaCEP and WeatherAPI.com

    Returns:
        Configured FastAPI application instance
    """
    return _build_app(
        ORCHESTRATOR_SERVICE_NAME,
        title="CEP Weather Orchestrator",
        description="Resolves a CEP to its city and the city's current temperature",
        router=orchestrator_router,
        tracer=tracer,
        metrics=metrics,
        transport=transport
    )


def create_gateway_app(
    tracer: Optional[trace.Tracer] = None,
    metrics: Optional[MetricsRecorder] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    orchestrator_url: str = ORCHESTRATOR_URL
) -> FastAPI:
    """Create the gateway (validate and forward) application.

    Args:
        tracer: Tracer for request spans (process provider if None)
        metrics: Request duration recorder (Prometheus if None)
        transport: Transport for outbound calls to the orchestrator
        orchestrator_url: Base URL of the orchestrator service

    Returns:
        Configured FastAPI application instance
    """
    app = _build_app(
        GATEWAY_SERVICE_NAME,
        title="CEP Weather Gateway",
        description="Validates CEP requests and forwards them to the orchestrator",
        router=gateway_router,
        tracer=tracer,
        metrics=metrics,
        transport=transport
    )
    app.state.orchestrator_url = orchestrator_url
    return app


# Create app instances for uvicorn
gateway_app = create_gateway_app()
orchestrator_app = create_orchestrator_app()


def run_gateway() -> None:
    """Entry point for the gateway service."""
    logger.info(f"Starting gateway on {HOST}:{GATEWAY_PORT}")
    uvicorn.run(
        "cep_weather.main:gateway_app",
        host=HOST,
        port=GATEWAY_PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )


def run_orchestrator() -> None:
    """Entry point for the orchestrator service."""
    logger.info(f"Starting orchestrator on {HOST}:{ORCHESTRATOR_PORT}")
    uvicorn.run(
        "cep_weather.main:orchestrator_app",
        host=HOST,
        port=ORCHESTRATOR_PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )
