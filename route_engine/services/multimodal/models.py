"""
Multimodal route value objects.
"""
from dataclasses import dataclass, field
from typing import Optional

from route_engine.core.exceptions import LegSequenceError
from route_engine.models.enums import ServiceType, TransportMode


@dataclass(frozen=True)
class TransportNode:
    """A named point where cargo changes legs (address, port, airport, terminal)."""
    name: str
    latitude: float
    longitude: float
    kind: str = "address"


@dataclass(frozen=True)
class TransportLeg:
    """One mode/carrier segment. Duration in hours, distance in km."""
    sequence: int
    mode: TransportMode
    service_type: ServiceType
    origin: TransportNode
    destination: TransportNode
    carrier: str
    distance_km: float
    duration_hours: float
    cost: float
    co2_kg: float
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class MultimodalRoute:
    """
    Ordered legs of a point-to-point shipment.

    Legs must be contiguous (each leg starts where the previous one ends)
    and sequenced 1..n. Aggregates are derived from the legs.
    """
    route_id: str
    template: str
    legs: tuple[TransportLeg, ...]
    score: Optional[float] = None
    total_cost: float = field(init=False)
    total_duration_hours: float = field(init=False)
    total_co2_kg: float = field(init=False)
    total_distance_km: float = field(init=False)

    def __post_init__(self):
        validate_legs(self.legs)
        object.__setattr__(self, "total_cost", sum(leg.cost for leg in self.legs))
        object.__setattr__(self, "total_duration_hours", sum(leg.duration_hours for leg in self.legs))
        object.__setattr__(self, "total_co2_kg", sum(leg.co2_kg for leg in self.legs))
        object.__setattr__(self, "total_distance_km", sum(leg.distance_km for leg in self.legs))

    @property
    def modes(self) -> tuple[TransportMode, ...]:
        return tuple(leg.mode for leg in self.legs)

    @property
    def service_types(self) -> tuple[ServiceType, ...]:
        return tuple(leg.service_type for leg in self.legs)


def validate_legs(legs: tuple[TransportLeg, ...]) -> None:
    """
    Raises:
        LegSequenceError: legs are empty, not numbered 1..n, or not contiguous.
    """
    if not legs:
        raise LegSequenceError("A multimodal route needs at least one leg")
    for expected, leg in enumerate(legs, start=1):
        if leg.sequence != expected:
            raise LegSequenceError(f"Leg sequence {leg.sequence} found where {expected} was expected")
    for previous, current in zip(legs, legs[1:]):
        if previous.destination != current.origin:
            raise LegSequenceError(
                f"Leg {previous.sequence} ends at {previous.destination.name} "
                f"but leg {current.sequence} starts at {current.origin.name}"
            )
