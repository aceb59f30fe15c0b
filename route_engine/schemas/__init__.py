"""
Pydantic schemas for engine inputs.
"""
from route_engine.schemas.base import BaseSchema, Location, TimeWindow
from route_engine.schemas.request import (
    Constraints,
    Destination,
    OptimizationRequest,
    Origin,
    RealTimeFactorFlags,
    SaveRouteRequest,
    VehicleProfile,
    parse_request,
)
from route_engine.schemas.multimodal import Cargo, PriorityWeights
from route_engine.schemas.simulation import SimulationScenario

__all__ = [
    "BaseSchema",
    "Location",
    "TimeWindow",
    "Constraints",
    "Destination",
    "OptimizationRequest",
    "Origin",
    "RealTimeFactorFlags",
    "SaveRouteRequest",
    "VehicleProfile",
    "parse_request",
    "Cargo",
    "PriorityWeights",
    "SimulationScenario",
]
