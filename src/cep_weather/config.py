"""Configuration settings for the CEP weather services."""

import os
from typing import Final, Optional
from dotenv import load_dotenv

load_dotenv()

# Service identity
GATEWAY_SERVICE_NAME: Final[str] = "cep-gateway"
ORCHESTRATOR_SERVICE_NAME: Final[str] = "cep-orchestrator"

# External API configuration
VIACEP_BASE_URL: str = os.getenv("VIACEP_BASE_URL", "https://viacep.com.br")
WEATHER_API_BASE_URL: str = os.getenv("WEATHER_API_BASE_URL", "http://api.weatherapi.com/v1")

# Gateway -> orchestrator
ORCHESTRATOR_URL: str = os.getenv("ORCHESTRATOR_URL", "http://orchestrator:8081")

# Outbound HTTP timeout, same as the httpx default
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "5.0"))

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
GATEWAY_PORT: int = int(os.getenv("GATEWAY_PORT", "8080"))
ORCHESTRATOR_PORT: int = int(os.getenv("ORCHESTRATOR_PORT", "8081"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Tracing: spans are exported only when a collector endpoint is set
OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or None


def get_weather_api_key() -> Optional[str]:
    """Read the weather API key from the environment.

    Read on every call so a missing key only fails the weather lookup,
    not the service startup.
    """
    return os.getenv("WEATHER_API_KEY") or None
