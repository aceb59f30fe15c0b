"""
Models package for the route engine.
"""
from route_engine.models.enums import (
    ComparisonCriterion,
    FuelType,
    IncidentSeverity,
    IncidentType,
    OptimizationState,
    Priority,
    RoadCondition,
    ServiceType,
    SolverAlgorithm,
    TransportMode,
    ViolationSeverity,
)

__all__ = [
    "ComparisonCriterion",
    "FuelType",
    "IncidentSeverity",
    "IncidentType",
    "OptimizationState",
    "Priority",
    "RoadCondition",
    "ServiceType",
    "SolverAlgorithm",
    "TransportMode",
    "ViolationSeverity",
]
