"""
What-if scenario schema for route simulation.
"""
from typing import Optional

from pydantic import Field

from route_engine.models.enums import RoadCondition
from route_engine.schemas.base import BaseSchema


class SimulationScenario(BaseSchema):
    """
    Synthetic context overrides for one simulation run.

    Unset overrides keep the value from the base context.
    """
    name: str = Field(..., min_length=1)
    probability: float = Field(default=1.0, ge=0, le=1)
    traffic_multiplier: float = Field(default=1.0, gt=0)
    congestion_level: Optional[float] = Field(default=None, ge=0, le=1)
    road_condition: Optional[RoadCondition] = None
    fuel_price_multiplier: float = Field(default=1.0, gt=0)
