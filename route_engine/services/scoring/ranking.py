"""
Weighted ranking of candidate routes.

Cost, duration and CO2 are normalized against fixed reference ceilings,
not against the candidate set, so a route's score does not change when
other routes are added or removed.
"""
from dataclasses import dataclass
from typing import Any, Sequence, Union

from route_engine.core.config import ScoringCeilings
from route_engine.schemas.multimodal import PriorityWeights
from route_engine.services.multimodal.models import MultimodalRoute
from route_engine.services.results import RouteOutcome

Rankable = Union[MultimodalRoute, RouteOutcome]


@dataclass(frozen=True)
class RouteMetrics:
    cost: float
    duration_hours: float
    co2_kg: float


@dataclass(frozen=True)
class RankedRoute:
    route: Any
    score: float
    cost_score: float
    speed_score: float
    sustainability_score: float


def route_metrics(route: Rankable) -> RouteMetrics:
    if isinstance(route, MultimodalRoute):
        return RouteMetrics(route.total_cost, route.total_duration_hours, route.total_co2_kg)
    if isinstance(route, RouteOutcome):
        return RouteMetrics(
            route.cost.total_cost,
            route.candidate.total_duration / 60.0,
            route.sustainability.co2_emissions,
        )
    raise TypeError(f"Cannot rank objects of type {type(route).__name__}")


def sub_score(value: float, ceiling: float) -> float:
    """1 at zero, 0 at or above the ceiling."""
    if ceiling <= 0:
        return 0.0
    return 1.0 - min(max(value, 0.0) / ceiling, 1.0)


def rank(
    routes: Sequence[Rankable],
    weights: PriorityWeights,
    ceilings: ScoringCeilings,
) -> list[RankedRoute]:
    """
    Score and sort routes, best first.

    score = cost_weight * cost_score + speed_weight * speed_score
            + sustainability_weight * sustainability_score

    Ties are broken by lowest total cost, then by input order.
    """
    ranked = []
    for route in routes:
        metrics = route_metrics(route)
        cost_score = sub_score(metrics.cost, ceilings.cost)
        speed_score = sub_score(metrics.duration_hours, ceilings.duration_hours)
        sustainability_score = sub_score(metrics.co2_kg, ceilings.co2_kg)
        score = (
            weights.cost * cost_score
            + weights.speed * speed_score
            + weights.sustainability * sustainability_score
        )
        ranked.append((RankedRoute(route, score, cost_score, speed_score, sustainability_score), metrics.cost))

    ranked.sort(key=lambda item: (-item[0].score, item[1]))
    return [item[0] for item in ranked]
