"""
Side-by-side comparison of routes across criteria.

Unlike ranking, comparison normalizes each criterion within the compared
set (min-max), so scores only mean "relative to these routes".
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from route_engine.core.exceptions import RequestValidationError
from route_engine.models.enums import ComparisonCriterion
from route_engine.services.multimodal.models import MultimodalRoute
from route_engine.services.results import RouteOutcome
from route_engine.services.solver.data_model import haversine_distance

logger = logging.getLogger(__name__)

Comparable = Union[RouteOutcome, MultimodalRoute]


@dataclass(frozen=True)
class CriterionComparison:
    criterion: ComparisonCriterion
    values: dict[str, float]
    scores: dict[str, float]
    winner: str


@dataclass(frozen=True)
class BestRoute:
    route_id: str
    score: float
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class ComparisonResult:
    best_route: BestRoute
    detailed_comparison: tuple[CriterionComparison, ...] = field(default_factory=tuple)


def _metric(route: Comparable, criterion: ComparisonCriterion) -> float:
    if isinstance(route, RouteOutcome):
        return {
            ComparisonCriterion.COST: route.cost.total_cost,
            ComparisonCriterion.DURATION: route.candidate.total_duration,
            ComparisonCriterion.DISTANCE: route.candidate.total_distance,
            ComparisonCriterion.EFFICIENCY: route.candidate.efficiency,
            ComparisonCriterion.EMISSIONS: route.sustainability.co2_emissions,
            ComparisonCriterion.FEASIBILITY: route.candidate.feasibility,
        }[criterion]

    if criterion == ComparisonCriterion.EFFICIENCY:
        first, last = route.legs[0].origin, route.legs[-1].destination
        direct = haversine_distance(first.latitude, first.longitude, last.latitude, last.longitude)
        return min(1.0, direct / route.total_distance_km) if route.total_distance_km > 0 else 1.0
    return {
        ComparisonCriterion.COST: route.total_cost,
        ComparisonCriterion.DURATION: route.total_duration_hours * 60.0,
        ComparisonCriterion.DISTANCE: route.total_distance_km,
        ComparisonCriterion.EMISSIONS: route.total_co2_kg,
        # Template routes carry no hard constraints
        ComparisonCriterion.FEASIBILITY: 1.0,
    }[criterion]


def parse_criteria(criteria: Optional[Sequence[Union[str, ComparisonCriterion]]]) -> list[ComparisonCriterion]:
    """Empty or None means every criterion. Unknown names are rejected."""
    if not criteria:
        return list(ComparisonCriterion)
    parsed = []
    unknown = []
    for item in criteria:
        try:
            criterion = ComparisonCriterion(item)
        except ValueError:
            unknown.append(str(item))
            continue
        if criterion not in parsed:
            parsed.append(criterion)
    if unknown:
        raise RequestValidationError(f"Unknown comparison criteria: {', '.join(unknown)}")
    return parsed


def _normalize(values: list[float], higher_is_better: bool) -> list[float]:
    low, high = min(values), max(values)
    if high == low:
        return [1.0] * len(values)
    if higher_is_better:
        return [(v - low) / (high - low) for v in values]
    return [(high - v) / (high - low) for v in values]


def compare_routes(
    routes: Sequence[Comparable],
    criteria: Optional[Sequence[Union[str, ComparisonCriterion]]] = None,
) -> ComparisonResult:
    """
    Compare routes per criterion and pick an overall best.

    The best route has the highest mean normalized score; ties go to the
    earlier route. Its reasons list the criteria it won.
    """
    if not routes:
        raise RequestValidationError("At least one route is required for comparison")
    route_ids = [route.route_id for route in routes]
    if len(set(route_ids)) != len(route_ids):
        raise RequestValidationError("Compared routes must have distinct route ids")

    selected = parse_criteria(criteria)
    totals = [0.0] * len(routes)
    detailed = []
    for criterion in selected:
        values = [_metric(route, criterion) for route in routes]
        scores = _normalize(values, criterion.higher_is_better)
        winner_position = max(range(len(routes)), key=lambda i: (scores[i], -i))
        for i, score in enumerate(scores):
            totals[i] += score
        detailed.append(CriterionComparison(
            criterion=criterion,
            values=dict(zip(route_ids, values)),
            scores=dict(zip(route_ids, scores)),
            winner=route_ids[winner_position],
        ))

    best_position = max(range(len(routes)), key=lambda i: (totals[i], -i))
    best_id = route_ids[best_position]
    reasons = tuple(
        f"Best {item.criterion.value} ({item.values[best_id]:.2f})"
        for item in detailed
        if item.winner == best_id
    )
    if not reasons:
        reasons = ("Best overall balance across the compared criteria",)

    logger.debug(f"Compared {len(routes)} routes on {len(selected)} criteria; best={best_id}")
    return ComparisonResult(
        best_route=BestRoute(route_id=best_id, score=totals[best_position] / len(selected), reasons=reasons),
        detailed_comparison=tuple(detailed),
    )
