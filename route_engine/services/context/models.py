"""
Real-time context value objects.

A RealTimeContext is built once per optimization run and shared read-only
by every solver and model in that run.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from route_engine.models.enums import FuelType, IncidentSeverity, IncidentType, RoadCondition


@dataclass(frozen=True)
class TrafficIncident:
    type: IncidentType
    latitude: float
    longitude: float
    severity: IncidentSeverity
    description: str = ""


@dataclass(frozen=True)
class TrafficConditions:
    congestion_level: float  # 0..1
    average_speed_kmh: float
    incidents: tuple[TrafficIncident, ...] = ()

    def __post_init__(self):
        if not 0.0 <= self.congestion_level <= 1.0:
            raise ValueError(f"congestion_level must be in [0, 1], got {self.congestion_level}")
        if self.average_speed_kmh <= 0:
            raise ValueError(f"average_speed_kmh must be positive, got {self.average_speed_kmh}")

    @property
    def high_severity_incidents(self) -> tuple[TrafficIncident, ...]:
        return tuple(i for i in self.incidents if i.severity == IncidentSeverity.HIGH)


@dataclass(frozen=True)
class WeatherConditions:
    temperature_c: float
    humidity: float
    wind_speed_kmh: float
    precipitation_mm: float
    visibility_km: float
    road_condition: RoadCondition
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class FuelPrices:
    """Price per fuel unit (litre; kWh for electric)."""
    diesel: float
    gasoline: float
    electric: float
    hybrid: Optional[float] = None

    def price_for(self, fuel_type: FuelType) -> float:
        if fuel_type == FuelType.DIESEL:
            return self.diesel
        if fuel_type == FuelType.ELECTRIC:
            return self.electric
        if fuel_type == FuelType.HYBRID and self.hybrid is not None:
            return self.hybrid
        # Hybrids burn gasoline when no dedicated price is quoted
        return self.gasoline


@dataclass(frozen=True)
class TimeFactors:
    is_rush_hour: bool
    is_weekend: bool
    is_holiday: bool
    traffic_multiplier: float


@dataclass(frozen=True)
class RealTimeContext:
    """
    Immutable snapshot of operating conditions.

    is_stale is set when any enabled signal fell back to last-known-good or
    default values; warnings describe which ones.
    """
    traffic: TrafficConditions
    weather: WeatherConditions
    fuel_prices: FuelPrices
    time_factors: TimeFactors
    captured_at: datetime
    region: str = "default"
    is_stale: bool = False
    warnings: tuple[str, ...] = field(default_factory=tuple)
