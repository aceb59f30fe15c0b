"""
Ant colony optimization over visiting orders.

Each ant builds an open route from the origin, choosing the next stop
with probability proportional to pheromone^alpha * visibility^beta, where
visibility is 1 / (distance + 0.1). Pheromone evaporates every iteration
and each ant deposits Q / objective on the arcs it used.
"""
import logging
import random
import time

from route_engine.models.enums import SolverAlgorithm
from route_engine.services.solver.data_model import RoutingProblem
from route_engine.services.solver.evaluator import (
    CandidateRoute,
    evaluate_sequence,
    require_feasible,
    route_objective,
)
from route_engine.services.solver.nearest_neighbor import nearest_neighbor_order

logger = logging.getLogger(__name__)


def _construct(
    problem: RoutingProblem,
    pheromone: list[list[float]],
    rng: random.Random,
) -> list[int]:
    budget = problem.budget
    unvisited = list(problem.customer_indices)
    order = []
    current = 0
    while unvisited:
        weights = [
            (pheromone[current][j] ** budget.aco_alpha)
            * ((1.0 / (problem.distance(current, j) + 0.1)) ** budget.aco_beta)
            for j in unvisited
        ]
        total = sum(weights)
        if total <= 0:
            chosen = unvisited[0]
        else:
            chosen = rng.choices(unvisited, weights=weights, k=1)[0]
        order.append(chosen)
        unvisited.remove(chosen)
        current = chosen
    return order


def forage(problem: RoutingProblem, rng: random.Random) -> list[int]:
    budget = problem.budget
    n = problem.num_locations
    pheromone = [[1.0] * n for _ in range(n)]

    best = nearest_neighbor_order(problem)
    best_cost = route_objective(problem, best)
    if len(best) < 2:
        return best

    deadline = time.monotonic() + budget.search_time_limit_seconds
    iteration = 0
    while iteration < budget.aco_iterations and time.monotonic() < deadline:
        tours = []
        for _ in range(budget.aco_ants):
            order = _construct(problem, pheromone, rng)
            cost = route_objective(problem, order)
            tours.append((cost, order))
            if cost < best_cost:
                best, best_cost = order, cost

        for i in range(n):
            for j in range(n):
                pheromone[i][j] *= (1.0 - budget.aco_evaporation_rate)

        for cost, order in tours:
            deposit = budget.aco_deposit / cost if cost > 0 else budget.aco_deposit
            previous = 0
            for node in order:
                pheromone[previous][node] += deposit
                previous = node
        iteration += 1

    logger.debug(f"Ant colony stopped after {iteration} iterations (best={best_cost:.2f})")
    return best


def solve(problem: RoutingProblem) -> CandidateRoute:
    rng = random.Random(problem.budget.random_seed)
    order = forage(problem, rng)
    return require_feasible(evaluate_sequence(problem, order, SolverAlgorithm.ANT_COLONY))
