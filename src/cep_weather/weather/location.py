"""Location lookup of CEP codes through the ViaCEP directory API."""

import logging
from typing import Optional

import httpx
from opentelemetry import propagate, trace
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError

from cep_weather.config import VIACEP_BASE_URL, HTTP_TIMEOUT_SECONDS
from cep_weather.errors import LocationNotFound
from cep_weather.weather.models import ViaCepResponse

logger = logging.getLogger(__name__)


class CepLocationClient:
    """Async client resolving a CEP to its locality name."""

    def __init__(
        self,
        tracer: trace.Tracer,
        base_url: str = VIACEP_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS
    ):
        """Initialize the location client.

        Args:
            tracer: Tracer used for the lookup span
            base_url: Base URL for the ViaCEP API
            transport: Optional transport (tests inject a mock one)
            timeout: Outbound request timeout in seconds
        """
        self.tracer = tracer
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(transport=transport, timeout=timeout)

    async def get_city(self, cep: str) -> str:
        """Resolve a validated CEP to a city name.

        Args:
            cep: 8-digit postal code

        Returns:
            Locality name

        Raises:
            LocationNotFound: If the API fails or yields no locality
        """
        with self.tracer.start_as_current_span("getLocation") as span:
            span.set_attribute("cep", cep)
            try:
                city = await self._fetch_city(cep)
            except LocationNotFound as e:
                span.set_status(Status(StatusCode.ERROR, e.message))
                raise
            span.set_attribute("city", city)
            return city

    async def _fetch_city(self, cep: str) -> str:
        url = f"{self.base_url}/ws/{cep}/json/"
        headers: dict = {}
        propagate.inject(headers)

        logger.info(f"Looking up location for CEP {cep}")

        try:
            response = await self.client.get(url, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Request error to ViaCEP API for CEP {cep}: {e}")
            raise LocationNotFound()

        if not response.is_success:
            logger.warning(f"ViaCEP API returned {response.status_code} for CEP {cep}")
            raise LocationNotFound()

        try:
            data = ViaCepResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Invalid ViaCEP response format for CEP {cep}: {e}")
            raise LocationNotFound()

        # ViaCEP answers unknown codes with 200 and {"erro": true}
        if data.erro or not data.localidade:
            logger.info(f"No locality found for CEP {cep}")
            raise LocationNotFound()

        logger.info(f"Resolved CEP {cep} to '{data.localidade}'")
        return data.localidade

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
