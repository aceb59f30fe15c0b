"""
What-if simulation of a route under synthetic conditions.

Each scenario overrides parts of the base context (traffic multiplier,
congestion, road condition, fuel prices). The route's stop order and
distances stay fixed; travel times are rescaled by the change in
effective speed, then cost, emissions and risk are recomputed.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Optional, Sequence

from route_engine.core.config import EngineConfig
from route_engine.core.exceptions import RequestValidationError
from route_engine.models.enums import RoadCondition
from route_engine.schemas.request import Constraints, VehicleProfile
from route_engine.schemas.simulation import SimulationScenario
from route_engine.services.context.models import RealTimeContext
from route_engine.services.costing.cost import compute_cost
from route_engine.services.costing.sustainability import compute_sustainability
from route_engine.services.results import RouteOutcome
from route_engine.services.solver.data_model import effective_speed_kmh
from route_engine.services.solver.evaluator import CandidateRoute

logger = logging.getLogger(__name__)

# Contribution of each factor to the scenario risk score
LATENESS_RISK_WEIGHT = 0.4
CONGESTION_RISK_WEIGHT = 0.2
ROAD_RISK_WEIGHT = 0.2
OVERRUN_RISK_WEIGHT = 0.2

ROAD_RISK = {
    RoadCondition.DRY: 0.0,
    RoadCondition.WET: 0.5,
    RoadCondition.SNOWY: 1.0,
    RoadCondition.ICY: 1.0,
}


@dataclass(frozen=True)
class ScenarioResult:
    scenario: str
    probability: float
    duration: float  # minutes
    cost: float
    co2_emissions: float
    fuel_efficiency: float
    risk: float
    breached_constraints: tuple[str, ...] = ()


@dataclass(frozen=True)
class BestScenario:
    scenario: str
    score: float
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class RiskAnalysis:
    high_risk_scenarios: tuple[str, ...] = ()
    mitigation_strategies: tuple[str, ...] = ()
    contingency_plans: tuple[str, ...] = ()
    expected_cost: float = 0.0


@dataclass(frozen=True)
class SimulationResult:
    results: tuple[ScenarioResult, ...]
    best_scenario: BestScenario
    risk_analysis: RiskAnalysis = field(default_factory=RiskAnalysis)


def apply_scenario(context: RealTimeContext, scenario: SimulationScenario) -> RealTimeContext:
    """Synthetic context with the scenario's overrides applied."""
    traffic = context.traffic
    if scenario.congestion_level is not None:
        traffic = replace(traffic, congestion_level=scenario.congestion_level)
    weather = context.weather
    if scenario.road_condition is not None:
        weather = replace(weather, road_condition=scenario.road_condition)
    prices = context.fuel_prices
    m = scenario.fuel_price_multiplier
    prices = replace(
        prices,
        diesel=prices.diesel * m,
        gasoline=prices.gasoline * m,
        electric=prices.electric * m,
        hybrid=prices.hybrid * m if prices.hybrid is not None else None,
    )
    time_factors = replace(
        context.time_factors,
        traffic_multiplier=context.time_factors.traffic_multiplier * scenario.traffic_multiplier,
    )
    return replace(
        context,
        traffic=traffic,
        weather=weather,
        fuel_prices=prices,
        time_factors=time_factors,
        warnings=context.warnings + (f"Simulated scenario: {scenario.name}",),
    )


def retime_candidate(
    candidate: CandidateRoute,
    travel_scale: float,
    constraints: Constraints,
) -> CandidateRoute:
    """
    Replay the stop order with travel times multiplied by travel_scale.

    Waiting, lateness, duration and feasibility are recomputed; stop order
    and distances are unchanged.
    """
    stops = []
    clock = 0.0
    total_travel = 0.0
    total_lateness = 0.0
    violations = []
    satisfied = 0
    departure = candidate.departure_time

    for stop in candidate.stops:
        travel = stop.travel_time * travel_scale
        arrival = clock + travel
        waiting = 0.0
        lateness = 0.0
        if stop.time_window_start is not None:
            window_start = (stop.time_window_start - departure).total_seconds() / 60.0
            window_end = (stop.time_window_end - departure).total_seconds() / 60.0
            if arrival < window_start:
                waiting = window_start - arrival
            elif arrival > window_end:
                lateness = arrival - window_end
        if lateness > 0:
            violations.append(f"Late at {stop.destination_id} by {lateness:.1f} min")
        else:
            satisfied += 1
        clock = arrival + waiting + stop.service_time
        total_travel += travel
        total_lateness += lateness
        stops.append(replace(
            stop,
            arrival_time=departure + timedelta(minutes=arrival),
            departure_time=departure + timedelta(minutes=clock),
            waiting_time=waiting,
            travel_time=travel,
            lateness=lateness,
        ))

    if constraints.max_distance_km is not None and candidate.total_distance > constraints.max_distance_km:
        violations.append(
            f"Distance {candidate.total_distance:.1f} km exceeds maximum {constraints.max_distance_km:.1f} km"
        )
    else:
        satisfied += 1
    if constraints.max_route_duration_minutes is not None and clock > constraints.max_route_duration_minutes:
        violations.append(
            f"Duration {clock:.1f} min exceeds maximum {constraints.max_route_duration_minutes:.1f} min"
        )
    else:
        satisfied += 1

    return replace(
        candidate,
        stops=tuple(stops),
        total_duration=clock,
        total_travel_time=total_travel,
        total_lateness=total_lateness,
        feasibility=satisfied / (len(stops) + 2),
        violations=tuple(violations),
    )


def _risk(retimed: CandidateRoute, base: CandidateRoute, context: RealTimeContext) -> float:
    late_stops = sum(1 for stop in retimed.stops if stop.lateness > 0)
    late_fraction = late_stops / len(retimed.stops) if retimed.stops else 0.0
    overrun = 0.0
    if base.total_duration > 0:
        overrun = min(1.0, max(0.0, retimed.total_duration / base.total_duration - 1.0))
    risk = (
        LATENESS_RISK_WEIGHT * late_fraction
        + CONGESTION_RISK_WEIGHT * context.traffic.congestion_level
        + ROAD_RISK_WEIGHT * ROAD_RISK.get(context.weather.road_condition, 0.0)
        + OVERRUN_RISK_WEIGHT * overrun
    )
    return min(1.0, risk)


def _mitigations(
    scenario: SimulationScenario,
    result: ScenarioResult,
    context: RealTimeContext,
    congestion_threshold: float,
) -> list[str]:
    strategies = []
    if context.weather.road_condition.is_severe:
        strategies.append("Equip vehicles for winter conditions and add buffer time")
    if context.traffic.congestion_level > congestion_threshold or scenario.traffic_multiplier > 1.2:
        strategies.append("Shift departure outside peak traffic or pre-plan alternative corridors")
    if any(b.startswith("Late at") for b in result.breached_constraints):
        strategies.append("Negotiate wider delivery windows or resequence time-critical stops first")
    if any("exceeds maximum" in b for b in result.breached_constraints):
        strategies.append("Split the route across two vehicles to stay within route limits")
    if scenario.fuel_price_multiplier > 1.2:
        strategies.append("Secure fuel at contracted prices before departure")
    return strategies


def simulate_route(
    route: RouteOutcome,
    scenarios: Sequence[SimulationScenario],
    base_context: RealTimeContext,
    vehicle: VehicleProfile,
    config: EngineConfig,
    constraints: Optional[Constraints] = None,
) -> SimulationResult:
    """
    Run each scenario against a route without modifying it.

    The best scenario has the lowest risk, then the lowest cost.
    Scenarios at or above the high-risk threshold, or breaching a
    constraint, are listed in the risk analysis.
    """
    if not scenarios:
        raise RequestValidationError("At least one simulation scenario is required")
    constraints = constraints or Constraints()

    base_speed = effective_speed_kmh(base_context, config.speed)
    results = []
    mitigation = []
    contingency = []
    high_risk = []

    for scenario in scenarios:
        context = apply_scenario(base_context, scenario)
        travel_scale = base_speed / effective_speed_kmh(context, config.speed)
        retimed = retime_candidate(route.candidate, travel_scale, constraints)
        cost = compute_cost(retimed, context, vehicle, config.cost, constraints)
        sustainability = compute_sustainability(retimed, context, vehicle, config.sustainability, config.cost)

        result = ScenarioResult(
            scenario=scenario.name,
            probability=scenario.probability,
            duration=retimed.total_duration,
            cost=cost.total_cost,
            co2_emissions=sustainability.co2_emissions,
            fuel_efficiency=sustainability.fuel_efficiency,
            risk=_risk(retimed, route.candidate, context),
            breached_constraints=retimed.violations,
        )
        results.append(result)

        if result.risk >= config.validation.high_risk_score or result.breached_constraints:
            high_risk.append(scenario.name)
            for strategy in _mitigations(scenario, result, context, config.recommendations.congestion_level):
                if strategy not in mitigation:
                    mitigation.append(strategy)
            contingency.append(
                f"If '{scenario.name}' materialises: notify affected customers and keep a standby vehicle ready"
            )

    best = min(results, key=lambda r: (r.risk, r.cost))
    reasons = [f"Lowest risk ({best.risk:.2f})"]
    if best.cost == min(r.cost for r in results):
        reasons.append(f"Lowest cost ({best.cost:.2f})")
    if not best.breached_constraints:
        reasons.append("No constraint breaches")

    total_probability = sum(r.probability for r in results)
    expected_cost = (
        sum(r.probability * r.cost for r in results) / total_probability
        if total_probability > 0
        else sum(r.cost for r in results) / len(results)
    )

    logger.info(f"Simulated {len(results)} scenarios; {len(high_risk)} high risk; best={best.scenario}")
    return SimulationResult(
        results=tuple(results),
        best_scenario=BestScenario(scenario=best.scenario, score=1.0 - best.risk, reasons=tuple(reasons)),
        risk_analysis=RiskAnalysis(
            high_risk_scenarios=tuple(high_risk),
            mitigation_strategies=tuple(mitigation),
            contingency_plans=tuple(contingency),
            expected_cost=expected_cost,
        ),
    )
