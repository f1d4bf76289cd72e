"""API endpoints for the orchestrator service."""

import logging

from fastapi import APIRouter, HTTPException, Request
from opentelemetry import propagate
from opentelemetry.trace import SpanKind

from cep_weather.errors import CepWeatherError
from cep_weather.weather.models import ErrorResponse, WeatherResponse
from cep_weather.weather.service import WeatherService
from cep_weather.weather.validation import parse_cep_request

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["weather"])


def get_weather_service(request: Request) -> WeatherService:
    """Build a request-scoped weather service from the app's collaborators."""
    return WeatherService(
        request.app.state.tracer,
        transport=request.app.state.transport
    )


@router.post(
    "/cep",
    response_model=WeatherResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)
async def get_weather_by_cep(request: Request) -> WeatherResponse:
    """Get the city and current temperature for a CEP.

    The CEP is validated here even when the request comes from the
    gateway, since this service can also be called directly.

    Returns:
        WeatherResponse with the temperature in Celsius, Fahrenheit and Kelvin

    Raises:
        HTTPException: 400/422 on invalid input, 404 if the CEP is unknown,
            500 if the temperature lookup fails
    """
    tracer = request.app.state.tracer
    parent_context = propagate.extract(request.headers)

    with tracer.start_as_current_span("HandleCEP", context=parent_context, kind=SpanKind.SERVER):
        body = await request.body()

        try:
            cep_request = parse_cep_request(body)

            async with get_weather_service(request) as weather_service:
                weather = await weather_service.get_weather_by_cep(cep_request)

        except CepWeatherError as e:
            logger.error(f"Error handling CEP request: {e.message}")
            raise HTTPException(status_code=e.status_code, detail=e.message)

        except Exception as e:
            logger.error(f"Unexpected error handling CEP request: {e}")
            raise HTTPException(status_code=500, detail="internal server error")

        logger.info(f"Resolved CEP {cep_request.cep} to {weather.city} at {weather.temp_C}C")
        return weather


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "cep-orchestrator"}
