"""
Solver registry: one solve function per algorithm.

Every entry has the signature solve(problem) -> CandidateRoute and raises
SolverError when it cannot produce a feasible route.
"""
from typing import Callable

from route_engine.models.enums import SolverAlgorithm
from route_engine.services.solver import annealing, ant_colony, genetic, nearest_neighbor, savings
from route_engine.services.solver.data_model import RoutingProblem
from route_engine.services.solver.evaluator import CandidateRoute

SolveFunction = Callable[[RoutingProblem], CandidateRoute]

SOLVERS: dict[SolverAlgorithm, SolveFunction] = {
    SolverAlgorithm.NEAREST_NEIGHBOR: nearest_neighbor.solve,
    SolverAlgorithm.SAVINGS: savings.solve,
    SolverAlgorithm.SIMULATED_ANNEALING: annealing.solve,
    SolverAlgorithm.GENETIC: genetic.solve,
    SolverAlgorithm.ANT_COLONY: ant_colony.solve,
}

ALGORITHM_CATALOGUE: tuple[dict, ...] = (
    {
        "id": SolverAlgorithm.NEAREST_NEIGHBOR,
        "name": "Nearest Neighbor",
        "description": "Greedy construction that always visits the closest remaining stop",
        "complexity": "O(n^2)",
        "suitable_for": "Fast baseline; fallback when other strategies fail",
        "guarantees_feasibility": False,
    },
    {
        "id": SolverAlgorithm.SAVINGS,
        "name": "Savings Algorithm",
        "description": "Clarke-Wright savings construction refined by OR-Tools local search",
        "complexity": "O(n^2 log n)",
        "suitable_for": "Good balance of speed and quality",
        "guarantees_feasibility": True,
    },
    {
        "id": SolverAlgorithm.SIMULATED_ANNEALING,
        "name": "Simulated Annealing",
        "description": "Local search with 2-opt, move and swap neighbors under a cooling schedule",
        "complexity": "O(iterations * n)",
        "suitable_for": "Escaping local optima on medium-size routes",
        "guarantees_feasibility": True,
    },
    {
        "id": SolverAlgorithm.GENETIC,
        "name": "Genetic Algorithm",
        "description": "Population search with order crossover, swap mutation and elitism",
        "complexity": "O(generations * population * n)",
        "suitable_for": "Complex problems with many time windows",
        "guarantees_feasibility": True,
    },
    {
        "id": SolverAlgorithm.ANT_COLONY,
        "name": "Ant Colony Optimization",
        "description": "Pheromone-guided probabilistic construction",
        "complexity": "O(iterations * ants * n^2)",
        "suitable_for": "Dense urban networks with many similar alternatives",
        "guarantees_feasibility": True,
    },
)
