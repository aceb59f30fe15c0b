"""
Real-time context collection.
"""
from route_engine.services.context.clients import (
    HttpRealTimeDataClient,
    RealTimeDataClient,
    StaticRealTimeDataClient,
    build_data_client,
)
from route_engine.services.context.defaults import (
    DEFAULT_FUEL_PRICES,
    DEFAULT_TIME_FACTORS,
    DEFAULT_TRAFFIC,
    DEFAULT_WEATHER,
)
from route_engine.services.context.models import (
    FuelPrices,
    RealTimeContext,
    TimeFactors,
    TrafficConditions,
    TrafficIncident,
    WeatherConditions,
)
from route_engine.services.context.provider import ContextProvider, compute_time_factors

__all__ = [
    "HttpRealTimeDataClient",
    "RealTimeDataClient",
    "StaticRealTimeDataClient",
    "build_data_client",
    "DEFAULT_FUEL_PRICES",
    "DEFAULT_TIME_FACTORS",
    "DEFAULT_TRAFFIC",
    "DEFAULT_WEATHER",
    "FuelPrices",
    "RealTimeContext",
    "TimeFactors",
    "TrafficConditions",
    "TrafficIncident",
    "WeatherConditions",
    "ContextProvider",
    "compute_time_factors",
]
