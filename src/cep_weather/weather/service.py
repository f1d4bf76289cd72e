"""Weather service aggregating the location and temperature lookups."""

import logging
from typing import Optional

import httpx
from opentelemetry import trace

from cep_weather.errors import LocationNotFound, WeatherLookupFailed
from cep_weather.weather.client import WeatherApiClient
from cep_weather.weather.location import CepLocationClient
from cep_weather.weather.models import CEPRequest, WeatherResponse

logger = logging.getLogger(__name__)


def celsius_to_fahrenheit(temp_c: float) -> float:
    """Convert Celsius to Fahrenheit."""
    return temp_c * 1.8 + 32


def celsius_to_kelvin(temp_c: float) -> float:
    """Convert Celsius to Kelvin (offset of 273, not 273.15)."""
    return temp_c + 273


class WeatherService:
    """Service resolving a CEP to the current weather of its city."""

    def __init__(
        self,
        tracer: trace.Tracer,
        location_client: Optional[CepLocationClient] = None,
        weather_client: Optional[WeatherApiClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the weather service.

        Args:
            tracer: Tracer shared with the clients
            location_client: Location client instance (creates default if None)
            weather_client: Weather client instance (creates default if None)
            transport: Transport for the default clients
        """
        self.tracer = tracer
        self.location_client = location_client or CepLocationClient(tracer, transport=transport)
        self.weather_client = weather_client or WeatherApiClient(tracer, transport=transport)

    async def get_weather_by_cep(self, cep_request: CEPRequest) -> WeatherResponse:
        """Resolve the city of a CEP and its current temperature.

        The weather lookup depends on the location result, so the two
        calls run one after the other and stop at the first failure.

        Args:
            cep_request: Validated CEP request

        Returns:
            WeatherResponse with the temperature in three units

        Raises:
            LocationNotFound: If the CEP has no usable locality
            WeatherLookupFailed: If the temperature lookup fails
        """
        cep = cep_request.cep

        try:
            city = await self.location_client.get_city(cep)
        except LocationNotFound:
            logger.warning(f"Location not found for CEP {cep}; skipping weather lookup")
            raise

        try:
            temp_c = await self.weather_client.get_temperature(city)
        except WeatherLookupFailed as e:
            logger.error(f"Weather lookup failed for '{city}' (CEP {cep}): {e.message}")
            raise

        return self.build_response(city, temp_c)

    @staticmethod
    def build_response(city: str, temp_c: float) -> WeatherResponse:
        """Assemble the response, converting the Celsius reading once."""
        return WeatherResponse(
            city=city,
            temp_C=temp_c,
            temp_F=celsius_to_fahrenheit(temp_c),
            temp_K=celsius_to_kelvin(temp_c)
        )

    async def aclose(self):
        """Close both API clients."""
        for client in (self.location_client, self.weather_client):
            try:
                await client.aclose()
            except Exception as e:
                logger.error(f"Error closing API client: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
