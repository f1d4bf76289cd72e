from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable

import httpx
import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from cep_weather.main import create_gateway_app, create_orchestrator_app
from cep_weather.telemetry import PrometheusMetrics

VIACEP_HOST = "viacep.com.br"
WEATHER_HOST = "api.weatherapi.com"
ORCHESTRATOR_URL = "http://orchestrator:8081"


class FakeUpstream:
    """Stands in for ViaCEP and WeatherAPI.com, recording every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.localities: dict[str, str] = {"01001000": "São Paulo"}
        self.viacep_status = 200
        self.temperatures: dict[str, float] = {"São Paulo": 25.0}
        self.weather_status = 200
        self.fail_hosts: set[str] = set()
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if host in self.fail_hosts:
            raise httpx.ConnectError("connection refused", request=request)

        if host == VIACEP_HOST:
            if self.viacep_status != 200:
                return httpx.Response(self.viacep_status, text="Bad Request")
            cep = request.url.path.split("/")[2]
            if cep in self.localities:
                return httpx.Response(200, json={"cep": cep, "localidade": self.localities[cep], "uf": "SP"})
            if cep == "00000000":
                return httpx.Response(200, json={"cep": cep, "localidade": ""})
            return httpx.Response(200, json={"erro": True})

        if host == WEATHER_HOST:
            if self.weather_status != 200:
                return httpx.Response(self.weather_status, json={"error": {"code": 2006, "message": "API key is invalid."}})
            city = request.url.params["q"]
            if city not in self.temperatures:
                return httpx.Response(400, json={"error": {"code": 1006, "message": "No matching location found."}})
            return httpx.Response(
                200,
                content=json.dumps({"location": {"name": city}, "current": {"temp_c": self.temperatures[city]}}),
                headers={"content-type": "application/json"},
            )

        return httpx.Response(404)

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture(autouse=True)
def weather_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEATHER_API_KEY", "test-key")


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter: InMemorySpanExporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    yield provider.get_tracer("tests")
    provider.shutdown()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def orchestrator_app(tracer, upstream: FakeUpstream):
    return create_orchestrator_app(tracer=tracer, metrics=PrometheusMetrics(), transport=upstream.transport)


@pytest.fixture
def gateway_app(tracer, orchestrator_app):
    return create_gateway_app(
        tracer=tracer,
        metrics=PrometheusMetrics(),
        transport=httpx.ASGITransport(app=orchestrator_app),
        orchestrator_url=ORCHESTRATOR_URL,
    )


def _client_for(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def orchestrator_client(orchestrator_app) -> AsyncIterator[httpx.AsyncClient]:
    async with _client_for(orchestrator_app) as client:
        yield client


@pytest.fixture
async def gateway_client(gateway_app) -> AsyncIterator[httpx.AsyncClient]:
    async with _client_for(gateway_app) as client:
        yield client


@pytest.fixture
def client_for() -> Callable[..., httpx.AsyncClient]:
    return _client_for
