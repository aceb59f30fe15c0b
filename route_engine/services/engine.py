"""
Route engine facade.

Exposes every caller-facing operation: route optimization, multimodal
planning, validation, simulation, comparison, the algorithm and
constraint catalogues, real-time context lookup and saved routes.
"""
import logging
from dataclasses import replace
from typing import Any, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from route_engine.core.config import EngineConfig, Settings
from route_engine.core.exceptions import PersistenceError, RequestValidationError
from route_engine.models.enums import ComparisonCriterion
from route_engine.schemas.base import Location
from route_engine.schemas.multimodal import Cargo, PriorityWeights
from route_engine.schemas.request import (
    Constraints,
    OptimizationRequest,
    RealTimeFactorFlags,
    SaveRouteRequest,
    VehicleProfile,
    format_validation_errors,
)
from route_engine.schemas.simulation import SimulationScenario
from route_engine.services.context.clients import RealTimeDataClient, StaticRealTimeDataClient, build_data_client
from route_engine.services.context.models import RealTimeContext
from route_engine.services.context.provider import Clock, ContextProvider
from route_engine.services.events import CeleryEventSink, EventSink, LoggingEventSink
from route_engine.services.multimodal.models import MultimodalRoute
from route_engine.services.multimodal.planner import MultimodalPlanner
from route_engine.services.orchestrator import RouteOptimizationOrchestrator
from route_engine.services.persistence import RouteRepository, SavedRoute, SqlAlchemyRouteRepository
from route_engine.services.results import OptimizationResult, RouteOutcome, to_payload
from route_engine.services.scoring.comparison import ComparisonResult, compare_routes
from route_engine.services.scoring.ranking import rank
from route_engine.services.solver.evaluator import CandidateRoute
from route_engine.services.solver.registry import ALGORITHM_CATALOGUE, SolveFunction
from route_engine.services.validation.simulator import SimulationResult, simulate_route
from route_engine.services.validation.validator import ValidationResult, validate_route

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

CONSTRAINT_CATALOGUE: tuple[dict, ...] = (
    {
        "id": "max_route_duration",
        "name": "Maximum route duration",
        "type": "hard",
        "unit": "minutes",
        "field": "constraints.max_route_duration_minutes",
    },
    {
        "id": "max_distance",
        "name": "Maximum route distance",
        "type": "hard",
        "unit": "km",
        "field": "constraints.max_distance_km",
    },
    {
        "id": "time_window",
        "name": "Delivery time windows",
        "type": "hard",
        "unit": "datetime",
        "field": "destinations[].time_window",
    },
    {
        "id": "capacity",
        "name": "Vehicle weight and volume capacity",
        "type": "hard",
        "unit": "kg / m3",
        "field": "vehicle.capacity, vehicle.volume_capacity",
    },
    {
        "id": "driver_skills",
        "name": "Driver skills for special requirements",
        "type": "hard",
        "unit": None,
        "field": "destinations[].special_requirements",
    },
    {
        "id": "avoid_tolls",
        "name": "Avoid toll roads",
        "type": "preference",
        "unit": None,
        "field": "constraints.avoid_tolls",
    },
    {
        "id": "avoid_highways",
        "name": "Avoid highways",
        "type": "preference",
        "unit": None,
        "field": "constraints.avoid_highways",
    },
    {
        "id": "time_window_slack",
        "name": "Tight time-window slack",
        "type": "soft",
        "unit": "minutes",
        "field": None,
    },
    {
        "id": "near_capacity",
        "name": "Near-capacity loading",
        "type": "soft",
        "unit": "ratio",
        "field": None,
    },
)


def coerce(schema: Type[SchemaT], value: Union[SchemaT, dict[str, Any], None]) -> Optional[SchemaT]:
    """Validate a dict into a schema, raising RequestValidationError on failure."""
    if value is None or isinstance(value, schema):
        return value
    try:
        return schema.model_validate(value)
    except ValidationError as exc:
        errors = format_validation_errors(exc)
        raise RequestValidationError(f"Invalid {schema.__name__}: {errors[0]}", errors) from exc


class RouteEngine:
    """
    Caller-facing route engine.

    Usage:
        engine = RouteEngine.from_settings(get_settings())
        result = await engine.optimize_routes(request)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        data_client: Optional[RealTimeDataClient] = None,
        repository: Optional[RouteRepository] = None,
        event_sink: Optional[EventSink] = None,
        solvers: Optional[dict[Any, SolveFunction]] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config or EngineConfig()
        self.repository = repository
        self.context_provider = ContextProvider(
            data_client or StaticRealTimeDataClient(), self.config, clock=clock,
        )
        self.orchestrator = RouteOptimizationOrchestrator(
            self.context_provider,
            self.config,
            event_sink=event_sink or LoggingEventSink(),
            repository=repository,
            solvers=solvers,
            clock=clock,
        )
        self.planner = MultimodalPlanner(self.config.multimodal)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RouteEngine":
        """Production wiring: provider client, SQL repository, Celery events."""
        return cls(
            config=EngineConfig.from_settings(settings),
            data_client=build_data_client(settings),
            repository=SqlAlchemyRouteRepository(),
            event_sink=CeleryEventSink(),
        )

    # =========================================================================
    # Optimization
    # =========================================================================
    async def optimize_routes(
        self,
        request: Union[OptimizationRequest, dict[str, Any]],
        save_as: Union[SaveRouteRequest, dict[str, Any], None] = None,
    ) -> OptimizationResult:
        return await self.orchestrator.optimize(request, save_as=coerce(SaveRouteRequest, save_as))

    def plan_multimodal_routes(
        self,
        origin: Union[Location, dict[str, Any]],
        destination: Union[Location, dict[str, Any]],
        cargo: Union[Cargo, dict[str, Any]],
        weights: Union[PriorityWeights, dict[str, Any], None] = None,
    ) -> list[MultimodalRoute]:
        """Plan every template and return them ranked, best first, with scores."""
        origin = coerce(Location, origin)
        destination = coerce(Location, destination)
        cargo = coerce(Cargo, cargo)
        weights = coerce(PriorityWeights, weights) or PriorityWeights()
        if origin is None or destination is None or cargo is None:
            raise RequestValidationError("origin, destination and cargo are required")

        routes = self.planner.plan_routes(origin, destination, cargo)
        ranked = rank(routes, weights, self.config.multimodal_ceilings)
        return [replace(item.route, score=item.score) for item in ranked]

    # =========================================================================
    # Validation, simulation, comparison
    # =========================================================================
    def validate_route(
        self,
        route: Union[RouteOutcome, CandidateRoute],
        constraints: Union[Constraints, dict[str, Any], None] = None,
        vehicle: Union[VehicleProfile, dict[str, Any], None] = None,
    ) -> ValidationResult:
        return validate_route(
            route,
            coerce(Constraints, constraints) or Constraints(),
            self.config.validation,
            vehicle=coerce(VehicleProfile, vehicle),
        )

    def simulate_route(
        self,
        route: RouteOutcome,
        scenarios: Sequence[Union[SimulationScenario, dict[str, Any]]],
        context: RealTimeContext,
        vehicle: Union[VehicleProfile, dict[str, Any]],
        constraints: Union[Constraints, dict[str, Any], None] = None,
    ) -> SimulationResult:
        return simulate_route(
            route,
            [coerce(SimulationScenario, scenario) for scenario in scenarios],
            context,
            coerce(VehicleProfile, vehicle),
            self.config,
            constraints=coerce(Constraints, constraints),
        )

    def compare_routes(
        self,
        routes: Sequence[Union[RouteOutcome, MultimodalRoute]],
        criteria: Optional[Sequence[Union[str, ComparisonCriterion]]] = None,
    ) -> ComparisonResult:
        return compare_routes(routes, criteria)

    # =========================================================================
    # Catalogues & context
    # =========================================================================
    def get_optimization_algorithms(self) -> list[dict[str, Any]]:
        return [to_payload(entry) for entry in ALGORITHM_CATALOGUE]

    def get_available_constraints(self) -> list[dict[str, Any]]:
        return [dict(entry) for entry in CONSTRAINT_CATALOGUE]

    async def get_real_time_context(
        self,
        origin: Union[Location, dict[str, Any]],
        destinations: Sequence[Union[Location, dict[str, Any]]] = (),
        region: Optional[str] = None,
        flags: Union[RealTimeFactorFlags, dict[str, Any], None] = None,
    ) -> RealTimeContext:
        return await self.context_provider.get_context(
            coerce(Location, origin),
            [coerce(Location, d) for d in destinations],
            region=region,
            flags=coerce(RealTimeFactorFlags, flags),
        )

    # =========================================================================
    # Saved routes
    # =========================================================================
    def _require_repository(self) -> RouteRepository:
        if self.repository is None:
            raise PersistenceError("No route repository configured")
        return self.repository

    async def save_route(
        self,
        route: Union[RouteOutcome, MultimodalRoute, dict[str, Any]],
        name: str,
        owner: str,
        description: Optional[str] = None,
    ) -> str:
        repository = self._require_repository()
        payload = route if isinstance(route, dict) else to_payload(route)
        route_id = await repository.save_route(payload, name, description, owner)
        logger.info(f"Saved route {route_id} for {owner}")
        return route_id

    async def get_saved_routes(self, search: Optional[str] = None, owner: Optional[str] = None) -> list[SavedRoute]:
        return await self._require_repository().get_saved_routes(search=search, owner=owner)

    async def delete_saved_route(self, route_id: str) -> bool:
        return await self._require_repository().delete_saved_route(route_id)

    async def reassign_saved_route(self, route_id: str, new_owner: str) -> SavedRoute:
        return await self._require_repository().reassign_saved_route(route_id, new_owner)

    async def use_saved_route(self, route_id: str) -> SavedRoute:
        """Load a saved route for reuse and count the use."""
        return await self._require_repository().record_usage(route_id)
