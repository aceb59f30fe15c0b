"""
Genetic algorithm over visiting orders.

Population seeded with the nearest-neighbor order plus random
permutations; tournament selection, order crossover (OX), swap mutation
and elitism. Bounded by the generation count and the solver time budget.
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


def order_crossover(parent1: list[int], parent2: list[int], rng: random.Random) -> list[int]:
    """OX: keep a slice of parent1, fill the rest in parent2's order."""
    size = len(parent1)
    start, end = sorted(rng.sample(range(size), 2))
    child = [None] * size
    child[start:end + 1] = parent1[start:end + 1]
    kept = set(child[start:end + 1])
    fill = [gene for gene in parent2 if gene not in kept]
    position = 0
    for i in range(size):
        if child[i] is None:
            child[i] = fill[position]
            position += 1
    return child


def swap_mutation(order: list[int], rate: float, rng: random.Random) -> list[int]:
    mutated = list(order)
    for i in range(len(mutated)):
        if rng.random() < rate:
            j = rng.randrange(len(mutated))
            mutated[i], mutated[j] = mutated[j], mutated[i]
    return mutated


def _tournament(scored: list[tuple[float, list[int]]], size: int, rng: random.Random) -> list[int]:
    contenders = rng.sample(scored, min(size, len(scored)))
    return min(contenders, key=lambda item: item[0])[1]


def evolve(problem: RoutingProblem, rng: random.Random) -> list[int]:
    budget = problem.budget
    seed = nearest_neighbor_order(problem)
    if len(seed) < 3:
        return min(
            (seed, list(reversed(seed))),
            key=lambda order: route_objective(problem, order),
        )

    population = [seed]
    while len(population) < budget.ga_population_size:
        individual = list(seed)
        rng.shuffle(individual)
        population.append(individual)

    deadline = time.monotonic() + budget.search_time_limit_seconds
    scored = sorted(((route_objective(problem, ind), ind) for ind in population), key=lambda item: item[0])

    generation = 0
    while generation < budget.ga_generations and time.monotonic() < deadline:
        next_population = [ind for _, ind in scored[:budget.ga_elite_size]]
        while len(next_population) < budget.ga_population_size:
            parent1 = _tournament(scored, budget.ga_tournament_size, rng)
            parent2 = _tournament(scored, budget.ga_tournament_size, rng)
            child = order_crossover(parent1, parent2, rng)
            next_population.append(swap_mutation(child, budget.ga_mutation_rate, rng))
        scored = sorted(
            ((route_objective(problem, ind), ind) for ind in next_population),
            key=lambda item: item[0],
        )
        generation += 1

    logger.debug(f"Genetic algorithm stopped after {generation} generations (best={scored[0][0]:.2f})")
    return scored[0][1]


def solve(problem: RoutingProblem) -> CandidateRoute:
    rng = random.Random(problem.budget.random_seed)
    order = evolve(problem, rng)
    return require_feasible(evaluate_sequence(problem, order, SolverAlgorithm.GENETIC))
