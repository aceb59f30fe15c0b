"""
Enum type definitions for the route engine.

String enums so values serialize directly into JSON payloads, Celery
messages and the saved_routes table.
"""
from enum import Enum


class Priority(str, Enum):
    """Destination delivery priority (admission order for capacity)."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Lower rank is admitted first."""
        return {
            Priority.HIGH: 0,
            Priority.MEDIUM: 1,
            Priority.LOW: 2,
        }[self]


class FuelType(str, Enum):
    """Vehicle fuel type. Electric consumption is measured in kWh."""
    DIESEL = "diesel"
    GASOLINE = "gasoline"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class RoadCondition(str, Enum):
    """Road surface condition reported by the weather provider."""
    DRY = "dry"
    WET = "wet"
    ICY = "icy"
    SNOWY = "snowy"

    @property
    def is_severe(self) -> bool:
        return self in (RoadCondition.ICY, RoadCondition.SNOWY)


class IncidentType(str, Enum):
    ACCIDENT = "accident"
    CONSTRUCTION = "construction"
    WEATHER = "weather"
    OTHER = "other"


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SolverAlgorithm(str, Enum):
    """
    Route construction strategies run by the orchestrator.

    Declaration order is the tie-break order when two candidates have the
    same efficiency and feasibility.
    """
    NEAREST_NEIGHBOR = "nearest_neighbor"
    SAVINGS = "savings"
    SIMULATED_ANNEALING = "simulated_annealing"
    GENETIC = "genetic"
    ANT_COLONY = "ant_colony"


class OptimizationState(str, Enum):
    """Orchestrator run states."""
    COLLECTING_CONTEXT = "COLLECTING_CONTEXT"
    RUNNING_SOLVERS = "RUNNING_SOLVERS"
    SELECTING_BEST = "SELECTING_BEST"
    ENRICHING = "ENRICHING"
    RECOMMENDING = "RECOMMENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class TransportMode(str, Enum):
    ROAD = "road"
    SEA = "sea"
    AIR = "air"
    RAIL = "rail"


class ServiceType(str, Enum):
    """
    Service level of a transport leg.

    - FTL / LTL: full / less-than truckload (road)
    - FCL / LCL: full / less-than container load (sea, rail)
    - EXPRESS / ECONOMY: air service levels
    """
    FTL = "ftl"
    LTL = "ltl"
    FCL = "fcl"
    LCL = "lcl"
    EXPRESS = "express"
    ECONOMY = "economy"


class ViolationSeverity(str, Enum):
    """Constraint violation severity (errors are hard breaches)."""
    ERROR = "error"
    WARNING = "warning"


class ComparisonCriterion(str, Enum):
    COST = "cost"
    DURATION = "duration"
    DISTANCE = "distance"
    EFFICIENCY = "efficiency"
    EMISSIONS = "emissions"
    FEASIBILITY = "feasibility"

    @property
    def higher_is_better(self) -> bool:
        return self in (ComparisonCriterion.EFFICIENCY, ComparisonCriterion.FEASIBILITY)
