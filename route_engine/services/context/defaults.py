"""
Named default signals used when a real-time source is disabled or down.
"""
from route_engine.models.enums import RoadCondition
from route_engine.services.context.models import (
    FuelPrices,
    TimeFactors,
    TrafficConditions,
    WeatherConditions,
)

DEFAULT_TRAFFIC = TrafficConditions(
    congestion_level=0.3,
    average_speed_kmh=45.0,
    incidents=(),
)

DEFAULT_WEATHER = WeatherConditions(
    temperature_c=20.0,
    humidity=60.0,
    wind_speed_kmh=15.0,
    precipitation_mm=0.0,
    visibility_km=10.0,
    road_condition=RoadCondition.DRY,
    warnings=(),
)

DEFAULT_FUEL_PRICES = FuelPrices(
    diesel=22.50,
    gasoline=24.30,
    electric=1.80,
)

DEFAULT_TIME_FACTORS = TimeFactors(
    is_rush_hour=False,
    is_weekend=False,
    is_holiday=False,
    traffic_multiplier=1.0,
)
