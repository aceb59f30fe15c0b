"""
Cost model for candidate routes.

All components are derived from the candidate and the context snapshot;
total_cost is always the sum of the named components.
"""
from dataclasses import dataclass, field
from typing import Optional

from route_engine.core.config import CostRates
from route_engine.schemas.request import Constraints, VehicleProfile
from route_engine.services.context.models import RealTimeContext
from route_engine.services.solver.evaluator import CandidateRoute


@dataclass(frozen=True)
class CostBreakdown:
    """Route cost split by component. total_cost is derived, never passed in."""
    fuel_cost: float
    driver_cost: float
    vehicle_cost: float
    toll_cost: float
    penalty_cost: float
    cost_savings: float
    fuel_consumption: float  # litres (kWh for electric)
    total_cost: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            "total_cost",
            self.fuel_cost + self.driver_cost + self.vehicle_cost + self.toll_cost + self.penalty_cost,
        )


def compute_fuel_consumption(
    distance_km: float,
    context: RealTimeContext,
    vehicle: VehicleProfile,
    rates: CostRates,
) -> float:
    """
    Fuel used over a distance.

    distance x consumption-per-km for the fuel type x time-of-day traffic
    multiplier x road-surface multiplier.
    """
    per_km = rates.fuel_consumption_per_km[vehicle.fuel_type]
    traffic_multiplier = context.time_factors.traffic_multiplier
    weather_multiplier = rates.weather_fuel_multipliers.get(context.weather.road_condition, 1.0)
    return distance_km * per_km * traffic_multiplier * weather_multiplier


def compute_cost(
    candidate: CandidateRoute,
    context: RealTimeContext,
    vehicle: VehicleProfile,
    rates: CostRates,
    constraints: Optional[Constraints] = None,
) -> CostBreakdown:
    """
    Price a candidate route.

    Penalty cost is lateness minutes times the late-penalty rate, so a
    feasible candidate carries none. cost_savings is the avoided cost
    against an un-optimized baseline of total x baseline_cost_multiplier.
    """
    avoid_tolls = constraints.avoid_tolls if constraints is not None else False

    fuel_consumption = compute_fuel_consumption(candidate.total_distance, context, vehicle, rates)
    fuel_cost = fuel_consumption * context.fuel_prices.price_for(vehicle.fuel_type)
    driver_cost = candidate.total_duration / 60.0 * rates.driver_hourly_rate
    vehicle_cost = candidate.total_distance * rates.vehicle_cost_per_km
    toll_cost = 0.0 if avoid_tolls else candidate.total_distance * rates.toll_cost_per_km
    penalty_cost = candidate.total_lateness * rates.late_penalty_per_minute

    total = fuel_cost + driver_cost + vehicle_cost + toll_cost + penalty_cost
    return CostBreakdown(
        fuel_cost=fuel_cost,
        driver_cost=driver_cost,
        vehicle_cost=vehicle_cost,
        toll_cost=toll_cost,
        penalty_cost=penalty_cost,
        cost_savings=total * (rates.baseline_cost_multiplier - 1.0),
        fuel_consumption=fuel_consumption,
    )
