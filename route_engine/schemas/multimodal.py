"""
Multimodal shipment schemas.
"""
from typing import Optional

from pydantic import Field

from route_engine.schemas.base import BaseSchema


class Cargo(BaseSchema):
    """Point-to-point shipment cargo."""
    weight: float = Field(..., ge=0, description="Gross weight in kg")
    volume: float = Field(..., ge=0, description="Volume in m3")
    is_urgent: bool = False
    is_hazardous: bool = False
    description: Optional[str] = None


class PriorityWeights(BaseSchema):
    """
    Operator priorities for ranking.

    Weights need not sum to 1; the weighted score is a relative ranking
    signal only.
    """
    cost: float = Field(default=0.4, ge=0)
    speed: float = Field(default=0.3, ge=0)
    sustainability: float = Field(default=0.3, ge=0)
