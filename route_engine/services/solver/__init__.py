"""
Route solver strategies.

Usage:
    problem = build_routing_problem(request, context, config, departure)
    candidate = SOLVERS[SolverAlgorithm.SAVINGS](problem)
"""
from route_engine.services.solver.data_model import (
    RoutingNode,
    RoutingProblem,
    admit_destinations,
    build_routing_problem,
    effective_speed_kmh,
    haversine_distance,
    resolve_departure,
)
from route_engine.services.solver.evaluator import (
    CandidateRoute,
    Stop,
    evaluate_sequence,
    route_objective,
)
from route_engine.services.solver.registry import ALGORITHM_CATALOGUE, SOLVERS, SolveFunction

__all__ = [
    "RoutingNode",
    "RoutingProblem",
    "admit_destinations",
    "build_routing_problem",
    "effective_speed_kmh",
    "haversine_distance",
    "resolve_departure",
    "CandidateRoute",
    "Stop",
    "evaluate_sequence",
    "route_objective",
    "ALGORITHM_CATALOGUE",
    "SOLVERS",
    "SolveFunction",
]
