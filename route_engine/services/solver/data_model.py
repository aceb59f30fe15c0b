"""
Routing problem model shared by every solver strategy.

Converts an OptimizationRequest plus a RealTimeContext into node data and
distance/travel-time matrices. Node 0 is always the origin; routes are
open (the vehicle does not return to the origin).
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from math import radians, sin, cos, sqrt, atan2
from typing import Optional

from route_engine.core.config import EngineConfig, SolverBudget, SpeedModel
from route_engine.schemas.base import Location
from route_engine.schemas.request import Destination, OptimizationRequest, VehicleProfile
from route_engine.services.context.models import RealTimeContext


@dataclass(frozen=True)
class RoutingNode:
    """A location in the routing model (origin or destination)."""
    index: int
    latitude: float
    longitude: float

    # Destination nodes only
    destination_id: Optional[str] = None

    # Time window in minutes relative to departure
    window_start: Optional[float] = None
    window_end: Optional[float] = None

    service_minutes: float = 0.0
    weight: float = 0.0
    volume: float = 0.0

    @property
    def is_origin(self) -> bool:
        return self.destination_id is None

    @property
    def has_window(self) -> bool:
        return self.window_start is not None and self.window_end is not None


@dataclass(frozen=True)
class RoutingProblem:
    """
    Immutable routing problem for one vehicle.

    Matrices are indexed by node index. Distances are in km, travel times
    in minutes under the context's traffic and road conditions.
    """
    nodes: tuple[RoutingNode, ...]
    distance_matrix: tuple[tuple[float, ...], ...]
    time_matrix: tuple[tuple[float, ...], ...]
    departure: datetime
    speed_kmh: float
    vehicle: VehicleProfile
    budget: SolverBudget
    max_duration_minutes: Optional[float] = None
    max_distance_km: Optional[float] = None
    vehicle_cost_per_km: float = 0.0
    driver_hourly_rate: float = 0.0
    unassigned_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def num_locations(self) -> int:
        return len(self.nodes)

    @property
    def customer_indices(self) -> list[int]:
        """Destination node indices in input order."""
        return [node.index for node in self.nodes if not node.is_origin]

    def distance(self, i: int, j: int) -> float:
        return self.distance_matrix[i][j]

    def travel_time(self, i: int, j: int) -> float:
        return self.time_matrix[i][j]


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points in kilometers.

    Uses the Haversine formula.
    """
    R = 6371.0  # Earth's radius in kilometers

    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = radians(lat2 - lat1)
    delta_lon = radians(lon2 - lon1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return R * c


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def effective_speed_kmh(context: RealTimeContext, speed: SpeedModel) -> float:
    """
    Average travel speed under the context.

    Traffic speed is slowed by the time-of-day multiplier and the road
    surface factor, and never drops below the configured floor.
    """
    road_factor = speed.road_condition_speed_factors.get(context.weather.road_condition, 1.0)
    multiplier = context.time_factors.traffic_multiplier or 1.0
    value = context.traffic.average_speed_kmh / multiplier * road_factor
    return max(value, speed.min_speed_kmh)


def admit_destinations(
    destinations: list[Destination],
    vehicle: VehicleProfile,
) -> tuple[list[Destination], list[Destination]]:
    """
    Select the destinations one vehicle can serve.

    Destinations are considered by priority (high first), then input order.
    A destination is admitted while cumulative weight and volume fit the
    vehicle and the driver holds every required skill. Admitted
    destinations are returned in input order.
    """
    skills = {skill.lower() for skill in vehicle.driver_skills}
    ranked = sorted(enumerate(destinations), key=lambda item: (item[1].priority.rank, item[0]))

    admitted_positions = set()
    unassigned = []
    weight = 0.0
    volume = 0.0
    for position, destination in ranked:
        required = {req.lower() for req in destination.special_requirements}
        if not required.issubset(skills):
            unassigned.append(destination)
            continue
        if weight + destination.weight > vehicle.capacity or volume + destination.volume > vehicle.volume_capacity:
            unassigned.append(destination)
            continue
        weight += destination.weight
        volume += destination.volume
        admitted_positions.add(position)

    admitted = [d for position, d in enumerate(destinations) if position in admitted_positions]
    return admitted, unassigned


def _relative_minutes(moment: datetime, departure: datetime) -> float:
    return (as_utc(moment) - departure).total_seconds() / 60.0


def compute_distance_matrix(nodes: list[RoutingNode]) -> tuple[tuple[float, ...], ...]:
    """Pairwise haversine distances in km."""
    n = len(nodes)
    matrix = [[0.0] * n for _ in range(n)]
    for i in range(n):
        for j in range(n):
            if i != j:
                matrix[i][j] = haversine_distance(
                    nodes[i].latitude, nodes[i].longitude,
                    nodes[j].latitude, nodes[j].longitude,
                )
    return tuple(tuple(row) for row in matrix)


def compute_time_matrix(
    distance_matrix: tuple[tuple[float, ...], ...],
    speed_kmh: float,
) -> tuple[tuple[float, ...], ...]:
    """Travel times in minutes at a uniform speed."""
    return tuple(
        tuple(dist / speed_kmh * 60.0 for dist in row)
        for row in distance_matrix
    )


def resolve_departure(request: OptimizationRequest, now: datetime) -> datetime:
    """Planned departure: explicit time, else origin window start, else now."""
    if request.departure_time is not None:
        return as_utc(request.departure_time)
    if request.origin.time_window is not None:
        return as_utc(request.origin.time_window.start)
    return as_utc(now)


def route_start(request: OptimizationRequest) -> Location:
    """Where the vehicle begins: its reported position, else the depot."""
    return request.vehicle.current_location or request.origin


def build_routing_problem(
    request: OptimizationRequest,
    context: RealTimeContext,
    config: EngineConfig,
    departure: datetime,
) -> RoutingProblem:
    """
    Build the routing problem for a request.

    Args:
        request: Validated optimization request
        context: Context snapshot shared by all solvers
        config: Engine configuration
        departure: Planned departure time (aware)

    Returns:
        RoutingProblem ready for any solver strategy
    """
    departure = as_utc(departure)
    admitted, unassigned = admit_destinations(list(request.destinations), request.vehicle)

    start = route_start(request)
    nodes = [RoutingNode(index=0, latitude=start.latitude, longitude=start.longitude)]
    for idx, destination in enumerate(admitted, start=1):
        window = destination.time_window
        nodes.append(RoutingNode(
            index=idx,
            latitude=destination.latitude,
            longitude=destination.longitude,
            destination_id=destination.id,
            window_start=_relative_minutes(window.start, departure) if window else None,
            window_end=_relative_minutes(window.end, departure) if window else None,
            service_minutes=destination.service_time_minutes,
            weight=destination.weight,
            volume=destination.volume,
        ))

    speed = effective_speed_kmh(context, config.speed)
    distance_matrix = compute_distance_matrix(nodes)

    return RoutingProblem(
        nodes=tuple(nodes),
        distance_matrix=distance_matrix,
        time_matrix=compute_time_matrix(distance_matrix, speed),
        departure=departure,
        speed_kmh=speed,
        vehicle=request.vehicle,
        budget=config.solver,
        max_duration_minutes=request.constraints.max_route_duration_minutes,
        max_distance_km=request.constraints.max_distance_km,
        vehicle_cost_per_km=config.cost.vehicle_cost_per_km,
        driver_hourly_rate=config.cost.driver_hourly_rate,
        unassigned_ids=tuple(d.id for d in unassigned),
    )
