"""
Nearest-neighbor construction.

Greedy and fast. Always returns a candidate (with honest feasibility),
so the orchestrator can fall back on it when the other strategies fail.
"""
from route_engine.models.enums import SolverAlgorithm
from route_engine.services.solver.data_model import RoutingProblem
from route_engine.services.solver.evaluator import CandidateRoute, evaluate_sequence


def nearest_neighbor_order(problem: RoutingProblem) -> list[int]:
    """Visit the closest unvisited destination next. Ties go to input order."""
    unvisited = list(problem.customer_indices)
    order = []
    current = 0
    while unvisited:
        nearest = min(unvisited, key=lambda i: (problem.distance(current, i), i))
        order.append(nearest)
        unvisited.remove(nearest)
        current = nearest
    return order


def solve(problem: RoutingProblem) -> CandidateRoute:
    return evaluate_sequence(problem, nearest_neighbor_order(problem), SolverAlgorithm.NEAREST_NEIGHBOR)
