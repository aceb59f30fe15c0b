"""
Shared route evaluation.

Every strategy produces only a visiting order; this module turns an order
into a timed CandidateRoute so efficiency and feasibility are measured
the same way for all of them.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from route_engine.core.exceptions import SolverError
from route_engine.models.enums import SolverAlgorithm
from route_engine.services.solver.data_model import RoutingProblem


@dataclass(frozen=True)
class Stop:
    """One timed visit in a candidate route."""
    sequence: int
    destination_id: str
    arrival_time: datetime
    departure_time: datetime
    service_time: float  # minutes
    waiting_time: float  # minutes
    travel_time: float  # minutes from previous stop
    distance_from_previous: float  # km
    incremental_cost: float
    lateness: float = 0.0  # minutes past window end
    time_window_start: Optional[datetime] = None
    time_window_end: Optional[datetime] = None

    @property
    def slack_minutes(self) -> Optional[float]:
        """Minutes between arrival and window end (None without a window)."""
        if self.time_window_end is None:
            return None
        return (self.time_window_end - self.arrival_time).total_seconds() / 60.0


@dataclass(frozen=True)
class CandidateRoute:
    """
    A solver's proposed stop sequence for one vehicle.

    total_distance equals the sum of stop distances; stops are ordered by
    non-decreasing arrival time. Durations are in minutes.
    """
    algorithm: SolverAlgorithm
    stops: tuple[Stop, ...]
    departure_time: datetime
    total_distance: float
    total_duration: float
    total_travel_time: float
    efficiency: float
    feasibility: float
    time_savings: float
    total_weight: float = 0.0
    total_volume: float = 0.0
    total_lateness: float = 0.0
    violations: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_feasible(self) -> bool:
        return not self.violations

    @property
    def destination_ids(self) -> list[str]:
        return [stop.destination_id for stop in self.stops]


@dataclass(frozen=True)
class Schedule:
    """Cheap schedule summary used inside search loops."""
    distance: float
    duration: float
    lateness: float
    late_stops: int


def simulate_schedule(problem: RoutingProblem, sequence: list[int]) -> Schedule:
    """Time a visiting order without building Stop objects."""
    clock = 0.0
    distance = 0.0
    lateness = 0.0
    late_stops = 0
    previous = 0
    for index in sequence:
        node = problem.nodes[index]
        distance += problem.distance(previous, index)
        clock += problem.travel_time(previous, index)
        if node.has_window:
            if clock < node.window_start:
                clock = node.window_start
            elif clock > node.window_end:
                lateness += clock - node.window_end
                late_stops += 1
        clock += node.service_minutes
        previous = index
    return Schedule(distance=distance, duration=clock, lateness=lateness, late_stops=late_stops)


def route_objective(problem: RoutingProblem, sequence: list[int]) -> float:
    """
    Search objective: distance in km plus penalties for hard-constraint
    breaches (lateness, excess distance, excess duration).
    """
    schedule = simulate_schedule(problem, sequence)
    excess = schedule.lateness
    if problem.max_distance_km is not None:
        excess += max(0.0, schedule.distance - problem.max_distance_km)
    if problem.max_duration_minutes is not None:
        excess += max(0.0, schedule.duration - problem.max_duration_minutes)
    return schedule.distance + problem.budget.search_violation_penalty * excess


def minimum_spanning_tree_length(problem: RoutingProblem, indices: list[int]) -> float:
    """Prim's algorithm over the distance matrix restricted to indices."""
    if len(indices) < 2:
        return 0.0
    remaining = set(indices[1:])
    best = {i: problem.distance(indices[0], i) for i in remaining}
    total = 0.0
    while remaining:
        nearest = min(remaining, key=lambda i: best[i])
        total += best[nearest]
        remaining.remove(nearest)
        for i in remaining:
            d = problem.distance(nearest, i)
            if d < best[i]:
                best[i] = d
    return total


def evaluate_sequence(
    problem: RoutingProblem,
    sequence: list[int],
    algorithm: SolverAlgorithm,
) -> CandidateRoute:
    """
    Build a timed CandidateRoute for a visiting order.

    Feasibility is the share of satisfied checks: one time-window check
    per stop plus the max-distance and max-duration checks. Efficiency is
    the spanning-tree lower bound over the visited points divided by the
    route distance.
    """
    if sorted(sequence) != sorted(problem.customer_indices):
        raise SolverError(algorithm.value, "sequence does not visit every admitted destination exactly once")

    stops = []
    clock = 0.0
    previous = 0
    total_distance = 0.0
    total_travel = 0.0
    total_lateness = 0.0
    weight = 0.0
    volume = 0.0
    violations = []
    satisfied = 0

    for position, index in enumerate(sequence, start=1):
        node = problem.nodes[index]
        distance = problem.distance(previous, index)
        travel = problem.travel_time(previous, index)
        clock += travel
        arrival = clock

        waiting = 0.0
        lateness = 0.0
        window_start = window_end = None
        if node.has_window:
            window_start = problem.departure + timedelta(minutes=node.window_start)
            window_end = problem.departure + timedelta(minutes=node.window_end)
            if arrival < node.window_start:
                waiting = node.window_start - arrival
            elif arrival > node.window_end:
                lateness = arrival - node.window_end
        if lateness > 0:
            violations.append(f"Late at {node.destination_id} by {lateness:.1f} min")
        else:
            satisfied += 1

        clock = arrival + waiting + node.service_minutes
        total_distance += distance
        total_travel += travel
        total_lateness += lateness
        weight += node.weight
        volume += node.volume

        stops.append(Stop(
            sequence=position,
            destination_id=node.destination_id,
            arrival_time=problem.departure + timedelta(minutes=arrival),
            departure_time=problem.departure + timedelta(minutes=clock),
            service_time=node.service_minutes,
            waiting_time=waiting,
            travel_time=travel,
            distance_from_previous=distance,
            incremental_cost=distance * problem.vehicle_cost_per_km + travel / 60.0 * problem.driver_hourly_rate,
            lateness=lateness,
            time_window_start=window_start,
            time_window_end=window_end,
        ))
        previous = index

    duration = clock
    total_checks = len(sequence) + 2
    if problem.max_distance_km is not None and total_distance > problem.max_distance_km:
        violations.append(f"Distance {total_distance:.1f} km exceeds maximum {problem.max_distance_km:.1f} km")
    else:
        satisfied += 1
    if problem.max_duration_minutes is not None and duration > problem.max_duration_minutes:
        violations.append(f"Duration {duration:.1f} min exceeds maximum {problem.max_duration_minutes:.1f} min")
    else:
        satisfied += 1

    if total_distance > 0:
        lower_bound = minimum_spanning_tree_length(problem, [0] + list(sequence))
        efficiency = min(1.0, lower_bound / total_distance)
    else:
        efficiency = 1.0

    baseline = simulate_schedule(problem, problem.customer_indices)

    return CandidateRoute(
        algorithm=algorithm,
        stops=tuple(stops),
        departure_time=problem.departure,
        total_distance=sum(stop.distance_from_previous for stop in stops),
        total_duration=duration,
        total_travel_time=total_travel,
        efficiency=efficiency,
        feasibility=satisfied / total_checks,
        time_savings=max(0.0, baseline.duration - duration),
        total_weight=weight,
        total_volume=volume,
        total_lateness=total_lateness,
        violations=tuple(violations),
    )


def require_feasible(candidate: CandidateRoute) -> CandidateRoute:
    """Reject a candidate that breaches a hard constraint."""
    if candidate.violations:
        raise SolverError(
            candidate.algorithm.value,
            f"no feasible route found ({'; '.join(candidate.violations)})",
        )
    return candidate
