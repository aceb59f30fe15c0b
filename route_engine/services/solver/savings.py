"""
Savings (Clarke-Wright) strategy using Google OR-Tools.

The routing model uses OR-Tools' SAVINGS first-solution strategy followed
by greedy-descent local search. Routes are open: arcs back to the origin
cost nothing, so the end cumul of each dimension is the route total.
Time windows and route limits are soft in the model; the shared
evaluator decides whether the resulting order is feasible.
"""
import logging
from datetime import datetime

from ortools.constraint_solver import routing_enums_pb2
from ortools.constraint_solver import pywrapcp

from route_engine.core.exceptions import SolverError
from route_engine.models.enums import SolverAlgorithm
from route_engine.services.solver.data_model import RoutingProblem
from route_engine.services.solver.evaluator import CandidateRoute, evaluate_sequence, require_feasible

logger = logging.getLogger(__name__)

# Horizon for the time dimension (one week in minutes)
TIME_HORIZON_MINUTES = 7 * 24 * 60

# Penalty for leaving a destination unvisited
DROP_PENALTY = 10_000_000_000


class SavingsRouteSolver:
    """
    Single-vehicle OR-Tools model seeded with the savings heuristic.

    Usage:
        candidate = SavingsRouteSolver(problem).solve()
    """

    def __init__(self, problem: RoutingProblem):
        self.problem = problem
        self.manager = None
        self.routing = None
        # Arc costs are in meters; penalties match route_objective per km and per minute
        self.distance_penalty = int(problem.budget.search_violation_penalty)
        self.time_penalty = int(problem.budget.search_violation_penalty * 1000)

    def solve(self) -> CandidateRoute:
        logger.debug(f"Savings solver: {self.problem.num_locations} locations")
        start_time = datetime.now()

        self.manager = pywrapcp.RoutingIndexManager(self.problem.num_locations, 1, 0)
        self.routing = pywrapcp.RoutingModel(self.manager)

        self._add_distance_dimension()
        self._add_time_dimension()
        self._add_disjunctions()

        solution = self.routing.SolveWithParameters(self._get_search_parameters())
        solve_time = (datetime.now() - start_time).total_seconds()

        if solution is None:
            raise SolverError(SolverAlgorithm.SAVINGS.value, f"OR-Tools found no solution (status {self.routing.status()})")

        order = self._extract_order(solution)
        missing = len(self.problem.customer_indices) - len(order)
        if missing:
            raise SolverError(SolverAlgorithm.SAVINGS.value, f"{missing} destinations left unrouted")

        logger.debug(f"Savings solver finished in {solve_time:.2f}s")
        return evaluate_sequence(self.problem, order, SolverAlgorithm.SAVINGS)

    def _distance_callback(self, from_index: int, to_index: int) -> int:
        """Distance in meters; returning to the origin is free."""
        from_node = self.manager.IndexToNode(from_index)
        to_node = self.manager.IndexToNode(to_index)
        if to_node == 0:
            return 0
        return int(round(self.problem.distance(from_node, to_node) * 1000))

    def _time_callback(self, from_index: int, to_index: int) -> int:
        """Travel time to the next node plus service time at the current one."""
        from_node = self.manager.IndexToNode(from_index)
        to_node = self.manager.IndexToNode(to_index)
        service = self.problem.nodes[from_node].service_minutes
        travel = 0.0 if to_node == 0 else self.problem.travel_time(from_node, to_node)
        return int(round(travel + service))

    def _add_distance_dimension(self):
        distance_callback_index = self.routing.RegisterTransitCallback(self._distance_callback)
        self.routing.SetArcCostEvaluatorOfAllVehicles(distance_callback_index)

        self.routing.AddDimension(
            distance_callback_index,
            0,  # No slack
            1000000000,
            True,  # Start cumul to zero
            "Distance",
        )

        if self.problem.max_distance_km is not None:
            distance_dimension = self.routing.GetDimensionOrDie("Distance")
            distance_dimension.SetCumulVarSoftUpperBound(
                self.routing.End(0),
                int(self.problem.max_distance_km * 1000),
                self.distance_penalty,
            )

    def _add_time_dimension(self):
        time_callback_index = self.routing.RegisterTransitCallback(self._time_callback)

        self.routing.AddDimension(
            time_callback_index,
            TIME_HORIZON_MINUTES,  # Waiting allowed
            TIME_HORIZON_MINUTES,
            True,  # Depart at minute zero
            "Time",
        )
        time_dimension = self.routing.GetDimensionOrDie("Time")

        for node in self.problem.nodes:
            if node.is_origin or not node.has_window:
                continue
            index = self.manager.NodeToIndex(node.index)
            earliest = max(0, int(round(node.window_start)))
            latest = int(round(node.window_end))
            if earliest > 0:
                time_dimension.CumulVar(index).SetMin(min(earliest, TIME_HORIZON_MINUTES))
            time_dimension.SetCumulVarSoftUpperBound(index, max(0, latest), self.time_penalty)

        if self.problem.max_duration_minutes is not None:
            time_dimension.SetCumulVarSoftUpperBound(
                self.routing.End(0),
                int(self.problem.max_duration_minutes),
                self.time_penalty,
            )

    def _add_disjunctions(self):
        for index in self.problem.customer_indices:
            self.routing.AddDisjunction([self.manager.NodeToIndex(index)], DROP_PENALTY)

    def _get_search_parameters(self):
        search_parameters = pywrapcp.DefaultRoutingSearchParameters()
        search_parameters.first_solution_strategy = (
            routing_enums_pb2.FirstSolutionStrategy.SAVINGS
        )
        search_parameters.local_search_metaheuristic = (
            routing_enums_pb2.LocalSearchMetaheuristic.GREEDY_DESCENT
        )
        search_parameters.time_limit.FromSeconds(self.problem.budget.savings_time_limit_seconds)
        search_parameters.log_search = False
        return search_parameters

    def _extract_order(self, solution) -> list[int]:
        order = []
        index = self.routing.Start(0)
        while not self.routing.IsEnd(index):
            node = self.manager.IndexToNode(index)
            if node != 0:
                order.append(node)
            index = solution.Value(self.routing.NextVar(index))
        return order


def solve(problem: RoutingProblem) -> CandidateRoute:
    return require_feasible(SavingsRouteSolver(problem).solve())
