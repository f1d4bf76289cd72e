"""Validation of inbound CEP requests."""

import logging
import re

from pydantic import ValidationError

from cep_weather.errors import InvalidFormat, InvalidRequest
from cep_weather.weather.models import CEPRequest

logger = logging.getLogger(__name__)

# ASCII digits only; \d would also accept other Unicode digits
CEP_PATTERN = re.compile(r"[0-9]{8}")


def is_valid_cep(cep) -> bool:
    """Return True if cep is exactly 8 ASCII decimal digits."""
    return isinstance(cep, str) and CEP_PATTERN.fullmatch(cep) is not None


def parse_cep_request(body: bytes) -> CEPRequest:
    """Parse and validate a raw request body.

    Args:
        body: Raw JSON request body

    Returns:
        Validated, immutable CEPRequest

    Raises:
        InvalidRequest: If the body is not a JSON object with a string cep
        InvalidFormat: If the cep is missing or not 8 decimal digits
    """
    try:
        request = CEPRequest.model_validate_json(body)
    except ValidationError as e:
        logger.warning(f"Rejected malformed request body: {e.error_count()} error(s)")
        raise InvalidRequest()

    if not is_valid_cep(request.cep):
        logger.warning(f"Rejected CEP with invalid format: {request.cep!r}")
        raise InvalidFormat()

    return request
