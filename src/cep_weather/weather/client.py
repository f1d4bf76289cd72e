"""HTTP client for the WeatherAPI.com current conditions API."""

import logging
from typing import Optional

import httpx
from opentelemetry import propagate, trace
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError

from cep_weather.config import WEATHER_API_BASE_URL, HTTP_TIMEOUT_SECONDS, get_weather_api_key
from cep_weather.errors import WeatherLookupFailed
from cep_weather.weather.models import WeatherApiResponse

logger = logging.getLogger(__name__)


class WeatherApiClient:
    """Async client fetching the current temperature of a city."""

    def __init__(
        self,
        tracer: trace.Tracer,
        base_url: str = WEATHER_API_BASE_URL,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS
    ):
        """Initialize the weather client.

        Args:
            tracer: Tracer used for the lookup span
            base_url: Base URL for the WeatherAPI.com API
            api_key: API key (read from WEATHER_API_KEY if None)
            transport: Optional transport (tests inject a mock one)
            timeout: Outbound request timeout in seconds
        """
        self.tracer = tracer
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else get_weather_api_key()
        self.client = httpx.AsyncClient(transport=transport, timeout=timeout)

    async def get_temperature(self, city: str) -> float:
        """Fetch the current temperature for a city.

        Args:
            city: Non-empty locality name

        Returns:
            Current temperature in Celsius, unconverted

        Raises:
            WeatherLookupFailed: If the API fails or the response is unusable
        """
        with self.tracer.start_as_current_span("getTemperature") as span:
            span.set_attribute("city", city)
            try:
                temperature = await self._fetch_temperature(city)
            except WeatherLookupFailed as e:
                span.set_status(Status(StatusCode.ERROR, e.message))
                if e.upstream_status is not None:
                    span.set_attribute("http.upstream_status_code", e.upstream_status)
                raise
            span.set_attribute("temp_c", temperature)
            return temperature

    async def _fetch_temperature(self, city: str) -> float:
        if not self.api_key:
            logger.error("WEATHER_API_KEY is not configured")
            raise WeatherLookupFailed("weather API key is not configured")

        url = f"{self.base_url}/current.json"
        # httpx percent-encodes the query values
        params = {"key": self.api_key, "q": city, "aqi": "no"}
        headers: dict = {}
        propagate.inject(headers)

        logger.info(f"Fetching current temperature for '{city}'")

        try:
            response = await self.client.get(url, params=params, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Request error to weather API for '{city}': {e}")
            raise WeatherLookupFailed()

        if not response.is_success:
            logger.error(f"HTTP error from weather API: {response.status_code} - {response.text}")
            raise WeatherLookupFailed(upstream_status=response.status_code)

        try:
            data = WeatherApiResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Invalid weather API response format: {e}")
            raise WeatherLookupFailed("invalid weather API response")

        logger.info(f"Current temperature in '{city}' is {data.current.temp_c}C")
        return data.current.temp_c

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
