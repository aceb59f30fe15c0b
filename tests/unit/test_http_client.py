"""Tests for HttpRealTimeDataClient using httpx.MockTransport."""
import httpx
import pytest

from route_engine.core.config import Settings
from route_engine.core.exceptions import ContextUnavailableError
from route_engine.models.enums import IncidentSeverity, RoadCondition
from route_engine.schemas import Location
from route_engine.services.context import (
    HttpRealTimeDataClient,
    StaticRealTimeDataClient,
    build_data_client,
)

BASE_URL = "http://provider.test"

RESPONSES = {
    "/traffic": {
        "congestion_level": 0.75,
        "average_speed_kmh": 25,
        "incidents": [
            {"type": "accident", "latitude": 40.75, "longitude": -73.99, "severity": "high"},
        ],
    },
    "/weather": {
        "temperature_c": -2,
        "humidity": 80,
        "wind_speed_kmh": 30,
        "precipitation_mm": 4,
        "visibility_km": 2,
        "road_condition": "icy",
        "warnings": ["Freezing rain"],
    },
    "/fuel-prices": {"diesel": 23.1, "gasoline": 25.0, "electric": 1.9},
}


@pytest.fixture
def requests_seen():
    return []


def make_client(handler, api_key=None):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpRealTimeDataClient(BASE_URL, api_key=api_key, client=http)


@pytest.fixture
def ok_client(requests_seen):
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return httpx.Response(200, json=RESPONSES[request.url.path])

    return make_client(handler, api_key="secret")


@pytest.fixture
def origin():
    return Location(latitude=40.7128, longitude=-74.0060)


class TestHttpRealTimeDataClient:

    async def test_traffic_parsed(self, ok_client, origin):
        traffic = await ok_client.get_traffic(origin, [Location(latitude=40.7589, longitude=-73.9851)])
        assert traffic.congestion_level == 0.75
        assert traffic.average_speed_kmh == 25.0
        assert traffic.incidents[0].severity == IncidentSeverity.HIGH

    async def test_traffic_query_params(self, ok_client, origin, requests_seen):
        await ok_client.get_traffic(origin, [Location(latitude=40.7589, longitude=-73.9851)])
        params = requests_seen[0].url.params
        assert params["origin"] == "40.712800,-74.006000"
        assert params["destinations"] == "40.758900,-73.985100"

    async def test_bearer_header(self, ok_client, origin, requests_seen):
        await ok_client.get_fuel_prices("nyc")
        assert requests_seen[0].headers["Authorization"] == "Bearer secret"
        assert requests_seen[0].url.params["region"] == "nyc"

    async def test_weather_parsed(self, ok_client, origin):
        weather = await ok_client.get_weather(origin, [])
        assert weather.road_condition == RoadCondition.ICY
        assert weather.warnings == ("Freezing rain",)

    async def test_fuel_prices_parsed(self, ok_client):
        prices = await ok_client.get_fuel_prices("nyc")
        assert prices.diesel == 23.1
        assert prices.hybrid is None

    async def test_http_error_maps_to_context_unavailable(self, origin):
        client = make_client(lambda request: httpx.Response(503))
        with pytest.raises(ContextUnavailableError):
            await client.get_traffic(origin, [])

    async def test_transport_error_maps_to_context_unavailable(self, origin):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with pytest.raises(ContextUnavailableError):
            await client.get_weather(origin, [])

    async def test_invalid_json_maps_to_context_unavailable(self):
        client = make_client(lambda request: httpx.Response(200, content=b"not json"))
        with pytest.raises(ContextUnavailableError):
            await client.get_fuel_prices("nyc")

    async def test_missing_field_maps_to_context_unavailable(self, origin):
        client = make_client(lambda request: httpx.Response(200, json={"congestion_level": 0.5}))
        with pytest.raises(ContextUnavailableError):
            await client.get_traffic(origin, [])

    @pytest.mark.parametrize("body", [[], "congestion", 42, None])
    async def test_non_object_body_maps_to_context_unavailable(self, origin, body):
        client = make_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ContextUnavailableError):
            await client.get_traffic(origin, [])

    async def test_non_object_incident_maps_to_context_unavailable(self, origin):
        body = {"congestion_level": 0.5, "average_speed_kmh": 30, "incidents": ["blocked"]}
        client = make_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ContextUnavailableError):
            await client.get_traffic(origin, [])

    async def test_out_of_range_congestion_rejected(self, origin):
        body = {"congestion_level": 1.5, "average_speed_kmh": 30}
        client = make_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ContextUnavailableError):
            await client.get_traffic(origin, [])


class TestBuildDataClient:

    def test_static_without_url(self):
        assert isinstance(build_data_client(Settings()), StaticRealTimeDataClient)

    def test_http_with_url(self):
        client = build_data_client(Settings(realtime_provider_url="http://provider.test/"))
        assert isinstance(client, HttpRealTimeDataClient)
        assert client.base_url == "http://provider.test"
