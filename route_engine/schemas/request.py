"""
Optimization request schemas.

A request describes one vehicle serving a set of destinations from an
origin. Parsing rejects malformed input before any work begins.
"""
from datetime import datetime
from typing import Any, Optional, Union
from uuid import uuid4

from pydantic import Field, ValidationError, field_validator

from route_engine.core.exceptions import RequestValidationError
from route_engine.models.enums import FuelType, Priority
from route_engine.schemas.base import BaseSchema, Location, TimeWindow


class Origin(Location):
    """Route origin (depot) with an optional operating window."""
    time_window: Optional[TimeWindow] = None


class Destination(Location):
    """
    A delivery stop.

    special_requirements lists skills the driver must hold (e.g. "hazmat",
    "refrigerated"); a destination whose requirements are not covered is
    left unassigned.
    """
    id: str = Field(..., min_length=1)
    priority: Priority = Priority.MEDIUM
    time_window: Optional[TimeWindow] = None
    service_time_minutes: float = Field(default=15.0, ge=0)
    weight: float = Field(default=0.0, ge=0, description="Weight in kg")
    volume: float = Field(default=0.0, ge=0, description="Volume in m3")
    special_requirements: list[str] = Field(default_factory=list)


class VehicleProfile(BaseSchema):
    """Caller-supplied vehicle and driver profile."""
    id: str = "vehicle-1"
    capacity: float = Field(..., ge=0, description="Weight capacity in kg")
    volume_capacity: float = Field(..., ge=0, description="Volume capacity in m3")
    fuel_type: FuelType = FuelType.DIESEL
    current_location: Optional[Location] = None
    driver_id: Optional[str] = None
    driver_skills: list[str] = Field(default_factory=list)


class Constraints(BaseSchema):
    """Hard route constraints. None means unconstrained."""
    max_route_duration_minutes: Optional[float] = Field(default=None, gt=0)
    max_distance_km: Optional[float] = Field(default=None, gt=0)
    avoid_tolls: bool = False
    avoid_highways: bool = False


class RealTimeFactorFlags(BaseSchema):
    """Which real-time signals to fetch; disabled signals use defaults."""
    include_traffic: bool = True
    include_weather: bool = True
    include_fuel_prices: bool = True
    include_time_factors: bool = True


class OptimizationRequest(BaseSchema):
    """Request to sequence one vehicle's stops."""
    request_id: str = Field(default_factory=lambda: str(uuid4()))
    origin: Origin
    destinations: list[Destination] = Field(default_factory=list)
    vehicle: VehicleProfile
    constraints: Constraints = Field(default_factory=Constraints)
    real_time_factors: RealTimeFactorFlags = Field(default_factory=RealTimeFactorFlags)
    region: Optional[str] = None
    departure_time: Optional[datetime] = Field(
        default=None,
        description="Planned departure; defaults to the origin window start, then now",
    )

    @field_validator("destinations")
    @classmethod
    def _unique_destination_ids(cls, value: list[Destination]) -> list[Destination]:
        seen = set()
        duplicates = []
        for destination in value:
            if destination.id in seen:
                duplicates.append(destination.id)
            seen.add(destination.id)
        if duplicates:
            raise ValueError(f"duplicate destination ids: {', '.join(sorted(set(duplicates)))}")
        return value


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into 'field.path: message' strings."""
    messages = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "request"
        messages.append(f"{path}: {error['msg']}")
    return messages


def parse_request(payload: Union[OptimizationRequest, dict[str, Any], None]) -> OptimizationRequest:
    """
    Validate a raw payload into an OptimizationRequest.

    Raises:
        RequestValidationError: payload is missing, malformed, or violates
            a field constraint (e.g. negative capacity).
    """
    if payload is None:
        raise RequestValidationError("request payload is required")
    if isinstance(payload, OptimizationRequest):
        return payload
    try:
        return OptimizationRequest.model_validate(payload)
    except ValidationError as exc:
        errors = format_validation_errors(exc)
        raise RequestValidationError(f"Invalid optimization request: {errors[0]}", errors) from exc


class SaveRouteRequest(BaseSchema):
    """Persist the optimized route under a name as part of the run."""
    name: str = Field(..., min_length=1, max_length=200)
    owner: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
