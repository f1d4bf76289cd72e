"""Tracing bootstrap and metrics recording."""

import logging
from typing import Optional, Protocol

from opentelemetry import propagate, trace
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator
from prometheus_client import CollectorRegistry, Histogram

from cep_weather.config import OTEL_EXPORTER_OTLP_ENDPOINT

logger = logging.getLogger(__name__)

_provider: Optional[TracerProvider] = None


def configure_tracing(service_name: str, otlp_endpoint: Optional[str] = OTEL_EXPORTER_OTLP_ENDPOINT) -> TracerProvider:
    """Install a process-wide tracer provider for a service.

    Args:
        service_name: Value of the service.name resource attribute
        otlp_endpoint: OTLP/gRPC collector endpoint; spans are dropped if None

    Returns:
        The installed TracerProvider
    """
    global _provider

    propagate.set_global_textmap(CompositePropagator([TraceContextTextMapPropagator()]))

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    if otlp_endpoint:
        # Imported lazily so the gRPC stack only loads when exporting
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
        logger.info(f"Exporting spans for {service_name} to {otlp_endpoint}")
    else:
        logger.info(f"No OTLP endpoint configured; spans for {service_name} are not exported")

    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def shutdown_tracing():
    """Flush and shut down the installed tracer provider."""
    global _provider

    if _provider is not None:
        try:
            _provider.shutdown()
        except Exception as e:
            logger.error(f"Error shutting down tracer provider: {e}")
        _provider = None


class MetricsRecorder(Protocol):
    """Collaborator recording the duration of handled requests."""

    def observe_request(self, path: str, duration_seconds: float) -> None:
        ...


class PrometheusMetrics:
    """Prometheus-backed MetricsRecorder with its own registry."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize the metrics recorder.

        Args:
            registry: Registry to register into (a fresh one if None)
        """
        self.registry = registry or CollectorRegistry()
        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests.",
            ["path"],
            registry=self.registry
        )

    def observe_request(self, path: str, duration_seconds: float) -> None:
        self.request_duration.labels(path=path).observe(duration_seconds)
