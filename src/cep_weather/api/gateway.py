"""API endpoints for the gateway service."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from opentelemetry import propagate
from opentelemetry.trace import SpanKind

from cep_weather.errors import CepWeatherError
from cep_weather.gateway.relay import OrchestratorRelay
from cep_weather.weather.models import ErrorResponse, WeatherResponse
from cep_weather.weather.validation import parse_cep_request

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gateway"])


def get_relay(request: Request) -> OrchestratorRelay:
    """Build a request-scoped relay from the app's collaborators."""
    return OrchestratorRelay(
        request.app.state.tracer,
        base_url=request.app.state.orchestrator_url,
        transport=request.app.state.transport
    )


@router.post(
    "/cep",
    response_model=WeatherResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)
async def forward_cep(request: Request) -> Response:
    """Validate a CEP and relay the orchestrator's answer unchanged.

    Raises:
        HTTPException: 400/422 on invalid input, 500 if the orchestrator
            cannot be reached
    """
    tracer = request.app.state.tracer
    parent_context = propagate.extract(request.headers)

    with tracer.start_as_current_span("HandleCEP", context=parent_context, kind=SpanKind.SERVER):
        body = await request.body()

        try:
            cep_request = parse_cep_request(body)

            async with get_relay(request) as relay:
                relayed = await relay.forward(cep_request)

        except CepWeatherError as e:
            logger.error(f"Error handling CEP request: {e.message}")
            raise HTTPException(status_code=e.status_code, detail=e.message)

        return Response(
            content=relayed.content,
            status_code=relayed.status_code,
            media_type=relayed.media_type
        )


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "cep-gateway"}
