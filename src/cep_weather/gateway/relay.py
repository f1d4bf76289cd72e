"""Forwarding of validated CEP requests to the orchestrator service."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from opentelemetry import propagate, trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from cep_weather.config import ORCHESTRATOR_URL, HTTP_TIMEOUT_SECONDS
from cep_weather.errors import DownstreamUnreachable
from cep_weather.weather.models import CEPRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelayedResponse:
    """Orchestrator response, kept verbatim."""
    status_code: int
    content: bytes
    media_type: Optional[str]


class OrchestratorRelay:
    """Async client forwarding CEP requests to the orchestrator."""

    def __init__(
        self,
        tracer: trace.Tracer,
        base_url: str = ORCHESTRATOR_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS
    ):
        self.tracer = tracer
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(transport=transport, timeout=timeout)

    async def forward(self, cep_request: CEPRequest) -> RelayedResponse:
        """Forward a validated CEP and return the orchestrator's answer.

        Non-2xx answers are returned as they are; only a failure to get
        any answer at all is an error.

        Raises:
            DownstreamUnreachable: If the orchestrator cannot be reached
        """
        url = f"{self.base_url}/cep"

        with self.tracer.start_as_current_span("ForwardCEP", kind=SpanKind.CLIENT) as span:
            span.set_attribute("cep", cep_request.cep)
            headers = {"Content-Type": "application/json"}
            propagate.inject(headers)

            try:
                response = await self.client.post(
                    url,
                    content=cep_request.model_dump_json(),
                    headers=headers
                )
            except httpx.RequestError as e:
                logger.error(f"Failed to call orchestrator at {url}: {e}")
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, "orchestrator unreachable"))
                raise DownstreamUnreachable()

            span.set_attribute("http.status_code", response.status_code)
            logger.info(f"Orchestrator answered {response.status_code} for CEP {cep_request.cep}")

            return RelayedResponse(
                status_code=response.status_code,
                content=response.content,
                media_type=response.headers.get("content-type")
            )

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
