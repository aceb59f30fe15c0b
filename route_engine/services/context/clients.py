"""
Real-time data clients for traffic, weather and fuel prices.

HttpRealTimeDataClient talks to a JSON provider over httpx;
StaticRealTimeDataClient serves the named defaults when no provider is
configured. Both raise ContextUnavailableError on failure so the context
provider can degrade gracefully.
"""
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import httpx

from route_engine.core.exceptions import ContextUnavailableError
from route_engine.models.enums import IncidentSeverity, IncidentType, RoadCondition
from route_engine.schemas.base import Location
from route_engine.services.context.defaults import (
    DEFAULT_FUEL_PRICES,
    DEFAULT_TRAFFIC,
    DEFAULT_WEATHER,
)
from route_engine.services.context.models import (
    FuelPrices,
    TrafficConditions,
    TrafficIncident,
    WeatherConditions,
)


class RealTimeDataClient(ABC):
    """Abstract source of real-time operating signals."""

    @abstractmethod
    async def get_traffic(
        self, origin: Location, destinations: Sequence[Location]
    ) -> TrafficConditions:
        """Traffic along the area spanned by origin and destinations."""

    @abstractmethod
    async def get_weather(
        self, origin: Location, destinations: Sequence[Location]
    ) -> WeatherConditions:
        """Weather and road surface conditions for the area."""

    @abstractmethod
    async def get_fuel_prices(self, region: str) -> FuelPrices:
        """Current fuel prices for a region."""


class StaticRealTimeDataClient(RealTimeDataClient):
    """Returns the default signals. Used when no provider URL is configured."""

    async def get_traffic(self, origin, destinations) -> TrafficConditions:
        return DEFAULT_TRAFFIC

    async def get_weather(self, origin, destinations) -> WeatherConditions:
        return DEFAULT_WEATHER

    async def get_fuel_prices(self, region: str) -> FuelPrices:
        return DEFAULT_FUEL_PRICES


def _format_points(points: Sequence[Location]) -> str:
    return ";".join(f"{p.latitude:.6f},{p.longitude:.6f}" for p in points)


class HttpRealTimeDataClient(RealTimeDataClient):
    """
    JSON-over-HTTP provider client.

    Endpoints (relative to base_url):
        GET /traffic?origin=lat,lon&destinations=lat,lon;lat,lon
        GET /weather?origin=...&destinations=...
        GET /fuel-prices?region=...

    Usage:
        async with httpx.AsyncClient(base_url=url) as http:
            client = HttpRealTimeDataClient(url, api_key, client=http)
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get_json(self, path: str, params: dict[str, str]) -> dict:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, headers=self._headers())
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise ContextUnavailableError(f"Real-time provider request {path} failed: {e}") from e
        except ValueError as e:
            raise ContextUnavailableError(f"Real-time provider returned invalid JSON for {path}: {e}") from e
        if not isinstance(data, dict):
            raise ContextUnavailableError(
                f"Real-time provider returned {type(data).__name__} for {path}, expected an object"
            )
        return data

    async def get_traffic(self, origin, destinations) -> TrafficConditions:
        data = await self._get_json(
            "/traffic",
            {"origin": _format_points([origin]), "destinations": _format_points(destinations)},
        )
        try:
            incidents = tuple(
                TrafficIncident(
                    type=IncidentType(item.get("type", "other")),
                    latitude=float(item["latitude"]),
                    longitude=float(item["longitude"]),
                    severity=IncidentSeverity(item.get("severity", "low")),
                    description=item.get("description", ""),
                )
                for item in data.get("incidents", [])
            )
            return TrafficConditions(
                congestion_level=float(data["congestion_level"]),
                average_speed_kmh=float(data["average_speed_kmh"]),
                incidents=incidents,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ContextUnavailableError(f"Failed to parse traffic response: {e}") from e

    async def get_weather(self, origin, destinations) -> WeatherConditions:
        data = await self._get_json(
            "/weather",
            {"origin": _format_points([origin]), "destinations": _format_points(destinations)},
        )
        try:
            return WeatherConditions(
                temperature_c=float(data["temperature_c"]),
                humidity=float(data["humidity"]),
                wind_speed_kmh=float(data["wind_speed_kmh"]),
                precipitation_mm=float(data["precipitation_mm"]),
                visibility_km=float(data["visibility_km"]),
                road_condition=RoadCondition(data["road_condition"]),
                warnings=tuple(data.get("warnings", [])),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ContextUnavailableError(f"Failed to parse weather response: {e}") from e

    async def get_fuel_prices(self, region: str) -> FuelPrices:
        data = await self._get_json("/fuel-prices", {"region": region})
        try:
            hybrid = data.get("hybrid")
            return FuelPrices(
                diesel=float(data["diesel"]),
                gasoline=float(data["gasoline"]),
                electric=float(data["electric"]),
                hybrid=float(hybrid) if hybrid is not None else None,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ContextUnavailableError(f"Failed to parse fuel price response: {e}") from e


def build_data_client(settings) -> RealTimeDataClient:
    """Choose the HTTP client when a provider URL is configured, else static defaults."""
    if settings.realtime_provider_url:
        return HttpRealTimeDataClient(
            settings.realtime_provider_url,
            api_key=settings.realtime_provider_api_key,
            timeout=settings.context_timeout_seconds,
        )
    return StaticRealTimeDataClient()
