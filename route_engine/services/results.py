"""
Optimization result value objects and JSON payload conversion.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic_core import to_jsonable_python

from route_engine.models.enums import OptimizationState, SolverAlgorithm
from route_engine.services.context.models import RealTimeContext
from route_engine.services.costing.cost import CostBreakdown
from route_engine.services.costing.sustainability import SustainabilityMetrics
from route_engine.services.solver.evaluator import CandidateRoute


@dataclass(frozen=True)
class RouteOutcome:
    """One enriched route: the selected candidate with its cost and sustainability."""
    route_id: str
    vehicle_id: str
    candidate: CandidateRoute
    cost: CostBreakdown
    sustainability: SustainabilityMetrics
    below_feasibility_threshold: bool = False

    @property
    def algorithm(self) -> SolverAlgorithm:
        return self.candidate.algorithm

    @property
    def efficiency(self) -> float:
        return self.candidate.efficiency

    @property
    def feasibility(self) -> float:
        return self.candidate.feasibility

    @property
    def time_savings(self) -> float:
        return self.candidate.time_savings

    @property
    def cost_savings(self) -> float:
        return self.cost.cost_savings

    @property
    def total_distance(self) -> float:
        return self.candidate.total_distance

    @property
    def total_duration(self) -> float:
        return self.candidate.total_duration

    @property
    def co2_emissions(self) -> float:
        return self.sustainability.co2_emissions


@dataclass(frozen=True)
class Summary:
    total_destinations: int
    assigned_destinations: int
    total_routes: int
    total_distance: float
    total_duration: float
    total_cost: float
    total_co2_emissions: float
    average_efficiency: float
    unassigned_destinations: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    selected_algorithm: Optional[SolverAlgorithm] = None
    solver_failures: dict[str, str] = field(default_factory=dict)
    context_stale: bool = False
    feasibility_warning: bool = False


@dataclass(frozen=True)
class OptimizationResult:
    request_id: str
    routes: tuple[RouteOutcome, ...]
    summary: Summary
    context: RealTimeContext
    candidates: tuple[CandidateRoute, ...] = ()
    state_history: tuple[OptimizationState, ...] = ()
    saved_route_id: Optional[str] = None

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.context.warnings


def to_payload(value: Any) -> Any:
    """Convert engine value objects into JSON-compatible structures."""
    return to_jsonable_python(value)
