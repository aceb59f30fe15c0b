"""
Route validation and what-if simulation.
"""
from route_engine.services.validation.simulator import (
    BestScenario,
    RiskAnalysis,
    ScenarioResult,
    SimulationResult,
    apply_scenario,
    retime_candidate,
    simulate_route,
)
from route_engine.services.validation.validator import ValidationResult, Violation, validate_route

__all__ = [
    "BestScenario",
    "RiskAnalysis",
    "ScenarioResult",
    "SimulationResult",
    "apply_scenario",
    "retime_candidate",
    "simulate_route",
    "ValidationResult",
    "Violation",
    "validate_route",
]
