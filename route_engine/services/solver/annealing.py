"""
Simulated annealing over visiting orders.

Starts from the nearest-neighbor order and explores 2-opt reversals,
single moves and swaps under a geometric cooling schedule. Bounded by the
iteration budget, the temperature floor and the solver time budget.
"""
import logging
import math
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


def _neighbor(order: list[int], rng: random.Random) -> list[int]:
    candidate = list(order)
    i, j = sorted(rng.sample(range(len(candidate)), 2))
    move = rng.random()
    if move < 0.4:
        # 2-opt reversal
        candidate[i:j + 1] = reversed(candidate[i:j + 1])
    elif move < 0.7:
        node = candidate.pop(i)
        candidate.insert(j, node)
    else:
        candidate[i], candidate[j] = candidate[j], candidate[i]
    return candidate


def anneal(problem: RoutingProblem, rng: random.Random) -> list[int]:
    budget = problem.budget
    current = nearest_neighbor_order(problem)
    if len(current) < 2:
        return current

    current_cost = route_objective(problem, current)
    best, best_cost = current, current_cost
    temperature = budget.sa_initial_temperature
    deadline = time.monotonic() + budget.search_time_limit_seconds

    iteration = 0
    while (
        iteration < budget.sa_max_iterations
        and temperature > budget.sa_min_temperature
        and time.monotonic() < deadline
    ):
        candidate = _neighbor(current, rng)
        candidate_cost = route_objective(problem, candidate)
        delta = candidate_cost - current_cost
        if delta < 0 or rng.random() < math.exp(-delta / temperature):
            current, current_cost = candidate, candidate_cost
            if current_cost < best_cost:
                best, best_cost = current, current_cost
        temperature *= budget.sa_cooling_rate
        iteration += 1

    logger.debug(f"Simulated annealing stopped after {iteration} iterations (best={best_cost:.2f})")
    return best


def solve(problem: RoutingProblem) -> CandidateRoute:
    rng = random.Random(problem.budget.random_seed)
    order = anneal(problem, rng)
    return require_feasible(evaluate_sequence(problem, order, SolverAlgorithm.SIMULATED_ANNEALING))
