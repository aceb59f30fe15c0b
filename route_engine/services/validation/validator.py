"""
Route validation against hard constraints and soft concerns.

Each check raises ConstraintViolationError; the validator collects them
into a ValidationResult, so validation itself never raises for a breach.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Union

from route_engine.core.config import ValidationThresholds
from route_engine.core.exceptions import ConstraintViolationError
from route_engine.models.enums import ViolationSeverity
from route_engine.schemas.request import Constraints, VehicleProfile
from route_engine.services.results import RouteOutcome
from route_engine.services.solver.evaluator import CandidateRoute, Stop

logger = logging.getLogger(__name__)

Check = Callable[[], None]


@dataclass(frozen=True)
class Violation:
    constraint: str
    severity: ViolationSeverity
    message: str


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    violations: tuple[Violation, ...] = ()
    feasibility_score: float = 1.0


def _max_distance_check(candidate: CandidateRoute, constraints: Constraints) -> Check:
    def check():
        limit = constraints.max_distance_km
        if limit is not None and candidate.total_distance > limit:
            raise ConstraintViolationError(
                "max_distance",
                f"Route distance {candidate.total_distance:.1f} km exceeds maximum {limit:.1f} km",
            )
    return check


def _max_duration_check(candidate: CandidateRoute, constraints: Constraints) -> Check:
    def check():
        limit = constraints.max_route_duration_minutes
        if limit is not None and candidate.total_duration > limit:
            raise ConstraintViolationError(
                "max_route_duration",
                f"Route duration {candidate.total_duration:.1f} min exceeds maximum {limit:.1f} min",
            )
    return check


def _time_window_check(stop: Stop) -> Check:
    def check():
        if stop.time_window_end is not None and stop.arrival_time > stop.time_window_end:
            late = (stop.arrival_time - stop.time_window_end).total_seconds() / 60.0
            raise ConstraintViolationError(
                "time_window",
                f"Arrival at {stop.destination_id} is {late:.1f} min after its time window closes",
            )
    return check


def _capacity_check(candidate: CandidateRoute, vehicle: VehicleProfile) -> Check:
    def check():
        if candidate.total_weight > vehicle.capacity:
            raise ConstraintViolationError(
                "capacity",
                f"Load {candidate.total_weight:.1f} kg exceeds vehicle capacity {vehicle.capacity:.1f} kg",
            )
        if candidate.total_volume > vehicle.volume_capacity:
            raise ConstraintViolationError(
                "volume_capacity",
                f"Load {candidate.total_volume:.2f} m3 exceeds vehicle volume {vehicle.volume_capacity:.2f} m3",
            )
    return check


def _tight_window_check(stop: Stop, thresholds: ValidationThresholds) -> Check:
    def check():
        slack = stop.slack_minutes
        if slack is not None and 0 <= slack < thresholds.tight_window_slack_minutes:
            raise ConstraintViolationError(
                "time_window_slack",
                f"Only {slack:.1f} min of slack at {stop.destination_id}",
                severity=ViolationSeverity.WARNING.value,
            )
    return check


def _near_capacity_check(candidate: CandidateRoute, vehicle: VehicleProfile, thresholds: ValidationThresholds) -> Check:
    def check():
        ratios = []
        if vehicle.capacity > 0:
            ratios.append(candidate.total_weight / vehicle.capacity)
        if vehicle.volume_capacity > 0:
            ratios.append(candidate.total_volume / vehicle.volume_capacity)
        utilisation = max(ratios, default=0.0)
        if thresholds.near_capacity_ratio <= utilisation <= 1.0:
            raise ConstraintViolationError(
                "near_capacity",
                f"Vehicle is loaded to {utilisation:.0%} of capacity",
                severity=ViolationSeverity.WARNING.value,
            )
    return check


def _hard_checks(candidate, constraints, vehicle) -> Iterator[Check]:
    yield _max_distance_check(candidate, constraints)
    yield _max_duration_check(candidate, constraints)
    for stop in candidate.stops:
        yield _time_window_check(stop)
    if vehicle is not None:
        yield _capacity_check(candidate, vehicle)


def _soft_checks(candidate, vehicle, thresholds) -> Iterator[Check]:
    for stop in candidate.stops:
        yield _tight_window_check(stop, thresholds)
    if vehicle is not None:
        yield _near_capacity_check(candidate, vehicle, thresholds)


def validate_route(
    route: Union[RouteOutcome, CandidateRoute],
    constraints: Constraints,
    thresholds: ValidationThresholds,
    vehicle: Optional[VehicleProfile] = None,
) -> ValidationResult:
    """
    Check a route against constraints.

    feasibility_score is the share of hard checks that passed; warnings
    do not lower it. Pure function of its inputs.
    """
    candidate = route.candidate if isinstance(route, RouteOutcome) else route

    violations = []
    hard_total = 0
    hard_passed = 0
    for check in _hard_checks(candidate, constraints, vehicle):
        hard_total += 1
        try:
            check()
            hard_passed += 1
        except ConstraintViolationError as e:
            violations.append(Violation(e.constraint, ViolationSeverity(e.severity), e.message))

    for check in _soft_checks(candidate, vehicle, thresholds):
        try:
            check()
        except ConstraintViolationError as e:
            violations.append(Violation(e.constraint, ViolationSeverity(e.severity), e.message))

    errors = tuple(v.message for v in violations if v.severity == ViolationSeverity.ERROR)
    warnings = tuple(v.message for v in violations if v.severity == ViolationSeverity.WARNING)
    if not candidate.stops:
        warnings += ("Route has no stops",)

    result = ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        violations=tuple(violations),
        feasibility_score=hard_passed / hard_total if hard_total else 1.0,
    )
    logger.debug(f"Validated route: valid={result.is_valid}, errors={len(errors)}, warnings={len(warnings)}")
    return result
