"""
Route scoring, ranking and comparison.
"""
from route_engine.services.scoring.comparison import (
    BestRoute,
    ComparisonResult,
    CriterionComparison,
    compare_routes,
    parse_criteria,
)
from route_engine.services.scoring.ranking import RankedRoute, RouteMetrics, rank, route_metrics, sub_score

__all__ = [
    "BestRoute",
    "ComparisonResult",
    "CriterionComparison",
    "compare_routes",
    "parse_criteria",
    "RankedRoute",
    "RouteMetrics",
    "rank",
    "route_metrics",
    "sub_score",
]
