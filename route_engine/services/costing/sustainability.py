"""
Sustainability model: CO2, fuel efficiency and an environmental score.
"""
from dataclasses import dataclass, field

from route_engine.core.config import CostRates, SustainabilityParameters
from route_engine.models.enums import FuelType
from route_engine.schemas.request import VehicleProfile
from route_engine.services.context.models import RealTimeContext
from route_engine.services.costing.cost import compute_fuel_consumption
from route_engine.services.solver.evaluator import CandidateRoute


@dataclass(frozen=True)
class SustainabilityMetrics:
    co2_emissions: float  # kg
    fuel_efficiency: float  # km per fuel unit
    environmental_score: float  # 0..100
    recommendations: tuple[str, ...] = field(default_factory=tuple)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def compute_sustainability(
    candidate: CandidateRoute,
    context: RealTimeContext,
    vehicle: VehicleProfile,
    params: SustainabilityParameters,
    rates: CostRates,
) -> SustainabilityMetrics:
    """
    Score the environmental impact of a candidate route.

    The CO2 sub-score falls by co2_score_factor per kg; the efficiency
    sub-score rises by efficiency_score_factor per km/unit. Both are
    clamped to [0, 100] and averaged.
    """
    fuel = compute_fuel_consumption(candidate.total_distance, context, vehicle, rates)
    co2 = fuel * params.emission_factors[vehicle.fuel_type]
    efficiency = candidate.total_distance / fuel if fuel > 0 else 0.0

    co2_score = _clamp(100.0 - co2 * params.co2_score_factor)
    efficiency_score = _clamp(efficiency * params.efficiency_score_factor)
    score = (co2_score + efficiency_score) / 2.0

    recommendations = []
    if co2 > params.high_co2_kg:
        recommendations.append("Consider using an electric or hybrid vehicle for this route")
    if fuel > 0 and efficiency < params.low_efficiency[vehicle.fuel_type]:
        recommendations.append("Vehicle maintenance recommended to improve fuel efficiency")
    if vehicle.fuel_type == FuelType.DIESEL and co2 > params.diesel_co2_kg:
        recommendations.append("Consider switching to biodiesel or renewable diesel to reduce emissions")

    return SustainabilityMetrics(
        co2_emissions=co2,
        fuel_efficiency=efficiency,
        environmental_score=score,
        recommendations=tuple(recommendations),
    )
