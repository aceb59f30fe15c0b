"""
Optimization orchestrator.

Sequences one optimization run through its states:

    COLLECTING_CONTEXT -> RUNNING_SOLVERS -> SELECTING_BEST -> ENRICHING
        -> RECOMMENDING -> COMPLETED

with FAILED reachable on an invalid request, when every solver fails,
when a mandatory save fails, or when the overall deadline passes.
Solvers run concurrently in worker threads against one immutable
context snapshot; each carries its own timeout.
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Optional, Union

from route_engine.core.config import EngineConfig
from route_engine.core.exceptions import (
    AllSolversFailedError,
    OptimizationTimeoutError,
    PersistenceError,
    RequestValidationError,
    SolverError,
)
from route_engine.models.enums import OptimizationState, SolverAlgorithm
from route_engine.schemas.request import OptimizationRequest, SaveRouteRequest, parse_request
from route_engine.services.context.models import RealTimeContext
from route_engine.services.context.provider import Clock, ContextProvider, utc_now
from route_engine.services.costing.cost import compute_cost
from route_engine.services.costing.sustainability import compute_sustainability
from route_engine.services.events import ROUTE_OPTIMIZATION_COMPLETED, EventSink, completion_payload
from route_engine.services.persistence import RouteRepository
from route_engine.services.recommendations import generate_recommendations
from route_engine.services.results import OptimizationResult, RouteOutcome, Summary, to_payload
from route_engine.services.solver.data_model import (
    RoutingProblem,
    build_routing_problem,
    resolve_departure,
    route_start,
)
from route_engine.services.solver.evaluator import CandidateRoute
from route_engine.services.solver.registry import SOLVERS, SolveFunction

logger = logging.getLogger(__name__)

# Declaration order of SolverAlgorithm breaks selection ties
_ALGORITHM_ORDER = list(SolverAlgorithm)


def select_best(
    candidates: list[CandidateRoute],
    threshold: float,
) -> tuple[CandidateRoute, bool]:
    """
    Pick the most efficient candidate that clears the feasibility threshold.

    When none clears it, the most feasible candidate is returned with the
    warning flag set.

    Returns:
        (candidate, below_threshold)
    """
    def order(candidate: CandidateRoute) -> int:
        return -_ALGORITHM_ORDER.index(candidate.algorithm)

    qualified = [c for c in candidates if c.feasibility >= threshold]
    if qualified:
        return max(qualified, key=lambda c: (c.efficiency, c.feasibility, order(c))), False
    return max(candidates, key=lambda c: (c.feasibility, c.efficiency, order(c))), True



def bound_search_time(problem: RoutingProblem, remaining_seconds: float) -> RoutingProblem:
    """
    Cap the solver search limits at the time left before the run deadline.

    Solver threads cannot be cancelled, so each strategy must stop on its
    own. OR-Tools takes whole seconds, so savings never drops below one.
    """
    budget = problem.budget
    remaining = max(0.0, remaining_seconds)
    if budget.search_time_limit_seconds <= remaining and budget.savings_time_limit_seconds <= remaining:
        return problem
    bounded = replace(
        budget,
        search_time_limit_seconds=min(budget.search_time_limit_seconds, remaining),
        savings_time_limit_seconds=max(1, min(budget.savings_time_limit_seconds, int(remaining))),
    )
    return replace(problem, budget=bounded)

class OptimizationRun:
    """State tracking for a single invocation."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        self.history: list[OptimizationState] = []

    @property
    def state(self) -> Optional[OptimizationState]:
        return self.history[-1] if self.history else None

    def transition(self, state: OptimizationState) -> None:
        logger.debug(f"Run {self.request_id}: {self.state.value if self.state else 'START'} -> {state.value}")
        self.history.append(state)


class RouteOptimizationOrchestrator:
    """
    Entry point for single-vehicle route optimization.

    Usage:
        orchestrator = RouteOptimizationOrchestrator(provider, config, event_sink=sink)
        result = await orchestrator.optimize(request)
    """

    def __init__(
        self,
        context_provider: ContextProvider,
        config: EngineConfig,
        event_sink: Optional[EventSink] = None,
        repository: Optional[RouteRepository] = None,
        solvers: Optional[dict[SolverAlgorithm, SolveFunction]] = None,
        clock: Optional[Clock] = None,
    ):
        self.context_provider = context_provider
        self.config = config
        self.event_sink = event_sink
        self.repository = repository
        self.solvers = dict(solvers) if solvers is not None else dict(SOLVERS)
        self.clock = clock or utc_now

    async def optimize(
        self,
        request: Union[OptimizationRequest, dict[str, Any]],
        save_as: Optional[SaveRouteRequest] = None,
    ) -> OptimizationResult:
        """
        Run one optimization.

        Raises:
            RequestValidationError: request is malformed; raised before any work.
            AllSolversFailedError: no strategy produced a candidate.
            PersistenceError: save_as was given and the save failed.
            OptimizationTimeoutError: the overall deadline passed.
        """
        request = parse_request(request)
        if save_as is not None and self.repository is None:
            raise RequestValidationError("save_as requires a configured route repository")

        run = OptimizationRun(request.request_id)
        deadline = self.config.optimization_deadline_seconds
        logger.info(
            f"Optimization {request.request_id} started: {len(request.destinations)} destinations, "
            f"vehicle {request.vehicle.id}"
        )
        expires_at = asyncio.get_running_loop().time() + deadline
        try:
            return await asyncio.wait_for(self._run(request, run, save_as, expires_at), timeout=deadline)
        except asyncio.TimeoutError:
            run.transition(OptimizationState.FAILED)
            logger.error(f"Optimization {request.request_id} exceeded its {deadline:.1f}s deadline")
            raise OptimizationTimeoutError(deadline)

    async def _run(
        self,
        request: OptimizationRequest,
        run: OptimizationRun,
        save_as: Optional[SaveRouteRequest],
        expires_at: float,
    ) -> OptimizationResult:
        run.transition(OptimizationState.COLLECTING_CONTEXT)
        departure = resolve_departure(request, self.clock())
        context = await self.context_provider.get_context(
            route_start(request),
            request.destinations,
            region=request.region,
            flags=request.real_time_factors,
            at=departure,
        )
        problem = build_routing_problem(request, context, self.config, departure)

        routes: tuple[RouteOutcome, ...] = ()
        candidates: tuple[CandidateRoute, ...] = ()
        failures: dict[str, str] = {}
        selected: Optional[CandidateRoute] = None
        below_threshold = False

        if problem.customer_indices:
            run.transition(OptimizationState.RUNNING_SOLVERS)
            candidate_list, failures = await self._run_solvers(problem, expires_at)
            if not candidate_list:
                run.transition(OptimizationState.FAILED)
                logger.error(f"Optimization {request.request_id}: all solvers failed: {failures}")
                raise AllSolversFailedError(failures)
            candidates = tuple(candidate_list)

            run.transition(OptimizationState.SELECTING_BEST)
            selected, below_threshold = select_best(candidate_list, self.config.feasibility_threshold)
            if below_threshold:
                logger.warning(
                    f"Optimization {request.request_id}: no candidate reached feasibility "
                    f"{self.config.feasibility_threshold:.2f}; using {selected.algorithm.value} "
                    f"({selected.feasibility:.2f})"
                )
            else:
                logger.info(f"Optimization {request.request_id}: selected {selected.algorithm.value}")

            run.transition(OptimizationState.ENRICHING)
            routes = (self._enrich(request, context, selected, below_threshold),)

        run.transition(OptimizationState.RECOMMENDING)
        recommendations = list(generate_recommendations(
            context,
            routes,
            request.vehicle,
            self.config.recommendations,
            unassigned=problem.unassigned_ids,
        ))
        if below_threshold:
            recommendations.insert(0, (
                f"Selected route feasibility {selected.feasibility:.0%} is below the "
                f"{self.config.feasibility_threshold:.0%} threshold; review constraints before dispatch"
            ))

        summary = self._summarize(request, problem, routes, tuple(recommendations), selected, failures, context, below_threshold)

        saved_route_id = None
        if save_as is not None and routes:
            saved_route_id = await self._save(run, routes[0], save_as)

        run.transition(OptimizationState.COMPLETED)
        result = OptimizationResult(
            request_id=request.request_id,
            routes=routes,
            summary=summary,
            context=context,
            candidates=candidates,
            state_history=tuple(run.history),
            saved_route_id=saved_route_id,
        )
        self._publish(result)
        logger.info(
            f"Optimization {request.request_id} completed: {summary.total_routes} routes, "
            f"{summary.assigned_destinations}/{summary.total_destinations} destinations, "
            f"cost {summary.total_cost:.2f}"
        )
        return result

    async def _run_solvers(
        self,
        problem: RoutingProblem,
        expires_at: float,
    ) -> tuple[list[CandidateRoute], dict[str, str]]:
        """Run every solver concurrently; collect candidates and per-solver failures."""
        loop = asyncio.get_running_loop()
        problem = bound_search_time(problem, expires_at - loop.time())
        timeout = self.config.solver.timeout_seconds
        algorithms = list(self.solvers)
        executor = ThreadPoolExecutor(max_workers=max(1, len(algorithms)), thread_name_prefix="solver")
        try:
            outcomes = await asyncio.gather(
                *(
                    asyncio.wait_for(loop.run_in_executor(executor, self.solvers[algorithm], problem), timeout=timeout)
                    for algorithm in algorithms
                ),
                return_exceptions=True,
            )
        finally:
            executor.shutdown(wait=False)

        candidates = []
        failures = {}
        for algorithm, outcome in zip(algorithms, outcomes):
            if isinstance(outcome, CandidateRoute):
                candidates.append(outcome)
                logger.debug(
                    f"{algorithm.value}: distance={outcome.total_distance:.2f} km, "
                    f"efficiency={outcome.efficiency:.3f}, feasibility={outcome.feasibility:.3f}"
                )
            elif isinstance(outcome, asyncio.TimeoutError):
                failures[algorithm.value] = f"timed out after {timeout:.1f}s"
                logger.warning(f"Solver {algorithm.value} timed out after {timeout:.1f}s")
            elif isinstance(outcome, SolverError):
                failures[algorithm.value] = outcome.reason
                logger.warning(f"Solver {algorithm.value} failed: {outcome.reason}")
            elif isinstance(outcome, Exception):
                failures[algorithm.value] = f"unexpected error: {outcome!r}"
                logger.warning(f"Solver {algorithm.value} raised {outcome!r}", exc_info=outcome)
            else:
                raise outcome
        return candidates, failures

    def _enrich(
        self,
        request: OptimizationRequest,
        context: RealTimeContext,
        candidate: CandidateRoute,
        below_threshold: bool,
    ) -> RouteOutcome:
        cost = compute_cost(candidate, context, request.vehicle, self.config.cost, request.constraints)
        sustainability = compute_sustainability(
            candidate, context, request.vehicle, self.config.sustainability, self.config.cost,
        )
        return RouteOutcome(
            route_id=f"{request.request_id}-{request.vehicle.id}",
            vehicle_id=request.vehicle.id,
            candidate=candidate,
            cost=cost,
            sustainability=sustainability,
            below_feasibility_threshold=below_threshold,
        )

    def _summarize(
        self,
        request: OptimizationRequest,
        problem: RoutingProblem,
        routes: tuple[RouteOutcome, ...],
        recommendations: tuple[str, ...],
        selected: Optional[CandidateRoute],
        failures: dict[str, str],
        context: RealTimeContext,
        below_threshold: bool,
    ) -> Summary:
        return Summary(
            total_destinations=len(request.destinations),
            assigned_destinations=sum(len(route.candidate.stops) for route in routes),
            total_routes=len(routes),
            total_distance=sum(route.total_distance for route in routes),
            total_duration=sum(route.total_duration for route in routes),
            total_cost=sum(route.cost.total_cost for route in routes),
            total_co2_emissions=sum(route.co2_emissions for route in routes),
            average_efficiency=sum(route.efficiency for route in routes) / len(routes) if routes else 0.0,
            unassigned_destinations=problem.unassigned_ids,
            recommendations=recommendations,
            selected_algorithm=selected.algorithm if selected else None,
            solver_failures=failures,
            context_stale=context.is_stale,
            feasibility_warning=below_threshold,
        )

    async def _save(self, run: OptimizationRun, route: RouteOutcome, save_as: SaveRouteRequest) -> str:
        try:
            return await self.repository.save_route(
                to_payload(route), save_as.name, save_as.description, save_as.owner,
            )
        except PersistenceError:
            run.transition(OptimizationState.FAILED)
            logger.error(f"Optimization {run.request_id}: saving route '{save_as.name}' failed")
            raise

    def _publish(self, result: OptimizationResult) -> None:
        if self.event_sink is None:
            return
        summary = result.summary
        payload = completion_payload(
            request_id=result.request_id,
            total_destinations=summary.total_destinations,
            total_routes=summary.total_routes,
            total_cost=summary.total_cost,
            average_efficiency=summary.average_efficiency,
            selected_algorithm=summary.selected_algorithm.value if summary.selected_algorithm else None,
        )
        try:
            self.event_sink.publish(ROUTE_OPTIMIZATION_COMPLETED, payload)
        except Exception as e:
            logger.warning(f"Failed to publish {ROUTE_OPTIMIZATION_COMPLETED} for {result.request_id}: {e}")
