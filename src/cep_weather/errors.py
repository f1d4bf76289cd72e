"""Error taxonomy shared by the gateway and the orchestrator.

Each error knows the HTTP status it maps to at the boundary of the
service that raises it. Upstream services never re-interpret it.
"""

from typing import Optional


class CepWeatherError(Exception):
    """Base class for request-scoped failures."""

    status_code: int = 500
    default_message: str = "internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(CepWeatherError):
    """Raised when the request body is not the expected JSON shape."""

    status_code = 400
    default_message = "invalid request"


class InvalidFormat(CepWeatherError):
    """Raised when the CEP is not exactly 8 decimal digits."""

    status_code = 422
    default_message = "invalid zipcode"


class LocationNotFound(CepWeatherError):
    """Raised when the directory API yields no usable locality."""

    status_code = 404
    default_message = "CEP not found"


class WeatherLookupFailed(CepWeatherError):
    """Raised when the weather API is unreachable or returns an error."""

    status_code = 500
    default_message = "failed to get temperature"

    def __init__(self, message: Optional[str] = None, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        if message is None and upstream_status is not None:
            message = f"{self.default_message} - status {upstream_status}"
        super().__init__(message)


class DownstreamUnreachable(CepWeatherError):
    """Raised when the gateway cannot reach the orchestrator."""

    status_code = 500
    default_message = "failed to call orchestrator service"
