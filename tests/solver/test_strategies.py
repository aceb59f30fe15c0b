"""Tests for the solver strategies -- real OR-Tools and seeded metaheuristics."""
import random
from dataclasses import replace
from datetime import timedelta

import pytest

from route_engine.core.exceptions import SolverError
from route_engine.models.enums import SolverAlgorithm
from route_engine.services.solver import SOLVERS, ALGORITHM_CATALOGUE, build_routing_problem
from route_engine.services.solver.annealing import anneal
from route_engine.services.solver.genetic import order_crossover, swap_mutation
from route_engine.services.solver.nearest_neighbor import nearest_neighbor_order
from route_engine.services.solver.savings import SavingsRouteSolver


class TestNearestNeighbor:

    def test_visits_closest_first(self, routing_problem):
        order = nearest_neighbor_order(routing_problem)
        first = order[0]
        assert all(
            routing_problem.distance(0, first) <= routing_problem.distance(0, i)
            for i in routing_problem.customer_indices
        )

    def test_returns_infeasible_candidate_honestly(self, routing_problem):
        problem = replace(routing_problem, max_distance_km=0.5)
        candidate = SOLVERS[SolverAlgorithm.NEAREST_NEIGHBOR](problem)
        assert not candidate.is_feasible
        assert candidate.feasibility < 1.0


class TestGeneticOperators:

    def test_order_crossover_is_permutation(self):
        rng = random.Random(1)
        child = order_crossover([1, 2, 3, 4, 5, 6], [6, 5, 4, 3, 2, 1], rng)
        assert sorted(child) == [1, 2, 3, 4, 5, 6]

    def test_swap_mutation_is_permutation(self):
        rng = random.Random(1)
        mutated = swap_mutation([1, 2, 3, 4, 5], 1.0, rng)
        assert sorted(mutated) == [1, 2, 3, 4, 5]

    def test_zero_rate_keeps_order(self):
        assert swap_mutation([1, 2, 3], 0.0, random.Random(1)) == [1, 2, 3]


@pytest.mark.solver
class TestAllStrategies:

    @pytest.mark.parametrize("algorithm", list(SolverAlgorithm))
    def test_visits_every_destination_once(self, routing_problem, algorithm):
        candidate = SOLVERS[algorithm](routing_problem)
        assert candidate.algorithm == algorithm
        assert sorted(candidate.destination_ids) == ["d1", "d2", "d3", "d4", "d5"]
        assert candidate.is_feasible

    @pytest.mark.parametrize("algorithm", list(SolverAlgorithm))
    def test_efficiency_in_unit_interval(self, routing_problem, algorithm):
        candidate = SOLVERS[algorithm](routing_problem)
        assert 0.0 < candidate.efficiency <= 1.0

    @pytest.mark.parametrize("algorithm", [
        SolverAlgorithm.SIMULATED_ANNEALING,
        SolverAlgorithm.GENETIC,
        SolverAlgorithm.ANT_COLONY,
    ])
    def test_seeded_search_is_deterministic(self, routing_problem, algorithm):
        first = SOLVERS[algorithm](routing_problem)
        second = SOLVERS[algorithm](routing_problem)
        assert first.destination_ids == second.destination_ids

    @pytest.mark.parametrize("algorithm", [
        SolverAlgorithm.SAVINGS,
        SolverAlgorithm.SIMULATED_ANNEALING,
        SolverAlgorithm.GENETIC,
        SolverAlgorithm.ANT_COLONY,
    ])
    def test_infeasible_problem_raises(self, routing_problem, algorithm):
        problem = replace(routing_problem, max_distance_km=0.5)
        with pytest.raises(SolverError):
            SOLVERS[algorithm](problem)

    def test_single_destination(self, make_request, default_context, engine_config, departure):
        problem = build_routing_problem(make_request(), default_context, engine_config, departure)
        for algorithm in SolverAlgorithm:
            candidate = SOLVERS[algorithm](problem)
            assert candidate.destination_ids == ["d1"]


@pytest.mark.solver
class TestTimeWindows:

    @pytest.fixture
    def windowed_problem(self, make_request, make_destination, default_context, engine_config, departure):
        # d_far must be visited first: its window closes before anything else could be done
        destinations = [
            make_destination("d_near", 40.7200, -74.0000),
            make_destination("d_far", 40.7589, -73.9851, time_window={
                "start": departure,
                "end": departure + timedelta(minutes=10),
            }),
        ]
        request = make_request(destinations=destinations)
        return build_routing_problem(request, default_context, engine_config, departure)

    def test_savings_respects_window(self, windowed_problem):
        candidate = SavingsRouteSolver(windowed_problem).solve()
        assert candidate.destination_ids[0] == "d_far"
        assert candidate.is_feasible

    def test_annealing_respects_window(self, windowed_problem):
        order = anneal(windowed_problem, random.Random(42))
        assert windowed_problem.nodes[order[0]].destination_id == "d_far"

    def test_nearest_neighbor_is_late(self, windowed_problem):
        candidate = SOLVERS[SolverAlgorithm.NEAREST_NEIGHBOR](windowed_problem)
        assert candidate.destination_ids[0] == "d_near"
        assert not candidate.is_feasible


class TestCatalogue:

    def test_every_algorithm_listed(self):
        assert [entry["id"] for entry in ALGORITHM_CATALOGUE] == list(SolverAlgorithm)

    def test_registry_covers_every_algorithm(self):
        assert set(SOLVERS) == set(SolverAlgorithm)
