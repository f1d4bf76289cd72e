"""Data models for the CEP weather services."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class CEPRequest(BaseModel):
    """Inbound request body carrying a postal code."""
    model_config = ConfigDict(frozen=True)

    cep: Optional[StrictStr] = Field(None, description="8-digit Brazilian postal code")


class WeatherResponse(BaseModel):
    """Aggregated city and temperature response."""
    city: str = Field(..., description="Resolved city name")
    temp_C: float = Field(..., description="Temperature in Celsius")
    temp_F: float = Field(..., description="Temperature in Fahrenheit")
    temp_K: float = Field(..., description="Temperature in Kelvin")


class ViaCepResponse(BaseModel):
    """Subset of the ViaCEP lookup payload."""
    localidade: Optional[str] = Field(None, description="Locality (city) name")
    erro: Optional[bool] = Field(None, description="Set when the CEP is unknown")


class WeatherApiCurrent(BaseModel):
    """Current conditions block of the WeatherAPI.com response."""
    temp_c: float = Field(..., description="Current temperature in Celsius")


class WeatherApiResponse(BaseModel):
    """Raw response from the WeatherAPI.com current endpoint."""
    current: WeatherApiCurrent = Field(..., description="Current conditions")


class ErrorResponse(BaseModel):
    """Error response model."""
    detail: str = Field(..., description="Error message")
