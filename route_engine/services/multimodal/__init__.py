"""
Multimodal leg planning.
"""
from route_engine.services.multimodal.models import (
    MultimodalRoute,
    TransportLeg,
    TransportNode,
    validate_legs,
)
from route_engine.services.multimodal.planner import MultimodalPlanner

__all__ = [
    "MultimodalRoute",
    "TransportLeg",
    "TransportNode",
    "validate_legs",
    "MultimodalPlanner",
]
