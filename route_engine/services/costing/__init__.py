"""
Cost and sustainability models.
"""
from route_engine.services.costing.cost import CostBreakdown, compute_cost, compute_fuel_consumption
from route_engine.services.costing.sustainability import SustainabilityMetrics, compute_sustainability

__all__ = [
    "CostBreakdown",
    "compute_cost",
    "compute_fuel_consumption",
    "SustainabilityMetrics",
    "compute_sustainability",
]
