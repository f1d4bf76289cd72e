from __future__ import annotations

import httpx
import pytest

from cep_weather.errors import WeatherLookupFailed
from cep_weather.weather.client import WeatherApiClient


def _client(tracer, handler, api_key: str | None = "secret") -> WeatherApiClient:
    return WeatherApiClient(
        tracer,
        base_url="http://weather.test/v1",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


async def test_returns_celsius_unconverted(tracer) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"location": {"name": "São Paulo"}, "current": {"temp_c": 21.3, "temp_f": 70.3}})

    async with _client(tracer, handler) as client:
        temperature = await client.get_temperature("São Paulo")

    assert temperature == 21.3
    (request,) = seen
    assert request.url.path == "/v1/current.json"
    assert request.url.params["key"] == "secret"
    assert request.url.params["q"] == "São Paulo"
    assert request.url.params["aqi"] == "no"
    assert "S%C3%A3o" in str(request.url)


async def test_negative_and_fractional_temperatures_pass_through(tracer) -> None:
    handler = lambda request: httpx.Response(200, json={"current": {"temp_c": -3.75}})

    async with _client(tracer, handler) as client:
        assert await client.get_temperature("Urupema") == -3.75


async def test_api_key_is_read_from_environment(tracer, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEATHER_API_KEY", "from-env")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"current": {"temp_c": 10}})

    client = WeatherApiClient(tracer, base_url="http://weather.test/v1", transport=httpx.MockTransport(handler))
    async with client:
        await client.get_temperature("Curitiba")

    assert seen[0].url.params["key"] == "from-env"


async def test_missing_api_key_fails_without_calling_the_api(tracer, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WEATHER_API_KEY", raising=False)
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"current": {"temp_c": 10}})

    client = WeatherApiClient(tracer, base_url="http://weather.test/v1", transport=httpx.MockTransport(handler))
    async with client:
        with pytest.raises(WeatherLookupFailed):
            await client.get_temperature("Curitiba")

    assert seen == []


@pytest.mark.parametrize("status", [400, 401, 403, 500, 502])
async def test_error_status_carries_upstream_status(tracer, status: int) -> None:
    handler = lambda request: httpx.Response(status, json={"error": {"message": "nope"}})

    async with _client(tracer, handler) as client:
        with pytest.raises(WeatherLookupFailed) as exc_info:
            await client.get_temperature("Recife")

    assert exc_info.value.upstream_status == status
    assert exc_info.value.status_code == 500
    assert str(status) in exc_info.value.message


async def test_transport_failure_has_no_upstream_status(tracer) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    async with _client(tracer, handler) as client:
        with pytest.raises(WeatherLookupFailed) as exc_info:
            await client.get_temperature("Recife")

    assert exc_info.value.upstream_status is None


@pytest.mark.parametrize(
    "payload",
    [{}, {"current": {}}, {"current": {"temp_c": "warm"}}, {"current": None}],
)
async def test_unusable_payload_fails(tracer, payload: dict) -> None:
    async with _client(tracer, lambda request: httpx.Response(200, json=payload)) as client:
        with pytest.raises(WeatherLookupFailed):
            await client.get_temperature("Recife")


async def test_failed_lookup_span_records_upstream_status(tracer, span_exporter) -> None:
    async with _client(tracer, lambda request: httpx.Response(403)) as client:
        with pytest.raises(WeatherLookupFailed):
            await client.get_temperature("Recife")

    (span,) = span_exporter.get_finished_spans()
    assert span.name == "getTemperature"
    assert span.attributes["http.upstream_status_code"] == 403
    assert not span.status.is_ok
