"""
Rule-based recommendation generator.

Each rule inspects the context snapshot and the enriched routes and
contributes at most one message. Rules are independent and may co-fire.
"""
from typing import Callable, Optional, Sequence

from route_engine.core.config import RecommendationThresholds
from route_engine.schemas.request import VehicleProfile
from route_engine.services.context.models import RealTimeContext
from route_engine.services.results import RouteOutcome

Rule = Callable[[RealTimeContext, Sequence[RouteOutcome], VehicleProfile, RecommendationThresholds], Optional[str]]


def _congestion(context, routes, vehicle, thresholds):
    if context.traffic.congestion_level > thresholds.congestion_level:
        return (
            f"High traffic congestion ({context.traffic.congestion_level:.0%}); "
            "consider delaying departure or using alternative routes"
        )
    return None


def _severe_road(context, routes, vehicle, thresholds):
    if context.weather.road_condition.is_severe:
        return (
            f"Hazardous road conditions ({context.weather.road_condition.value}); "
            "allow extra time and ensure vehicles are equipped for winter driving"
        )
    return None


def _fuel_price(context, routes, vehicle, thresholds):
    ceiling = thresholds.fuel_price_ceilings.get(vehicle.fuel_type)
    price = context.fuel_prices.price_for(vehicle.fuel_type)
    if ceiling is not None and price > ceiling:
        return (
            f"{vehicle.fuel_type.value.capitalize()} price {price:.2f} is above {ceiling:.2f}; "
            "consider fuel-efficient routing and refuelling where prices are lower"
        )
    return None


def _rush_hour(context, routes, vehicle, thresholds):
    if context.time_factors.is_rush_hour:
        return "Departure falls in rush hour; consider scheduling outside peak traffic"
    return None


def _incidents(context, routes, vehicle, thresholds):
    incidents = context.traffic.high_severity_incidents
    if incidents:
        return f"{len(incidents)} high-severity traffic incident(s) reported; monitor closures along the route"
    return None


def _weather_warnings(context, routes, vehicle, thresholds):
    if context.weather.warnings:
        return f"Weather warnings in effect: {', '.join(context.weather.warnings)}"
    return None


def _stale_context(context, routes, vehicle, thresholds):
    if context.is_stale:
        return "Real-time data was partly unavailable; route estimates use fallback conditions"
    return None


def _low_efficiency(context, routes, vehicle, thresholds):
    low = [route for route in routes if route.efficiency < thresholds.low_route_efficiency]
    if low:
        return (
            f"Route efficiency below {thresholds.low_route_efficiency:.0%}; "
            "consider relaxing time windows or splitting the stops across vehicles"
        )
    return None


RULES: tuple[Rule, ...] = (
    _congestion,
    _severe_road,
    _fuel_price,
    _rush_hour,
    _incidents,
    _weather_warnings,
    _stale_context,
    _low_efficiency,
)


def generate_recommendations(
    context: RealTimeContext,
    routes: Sequence[RouteOutcome],
    vehicle: VehicleProfile,
    thresholds: RecommendationThresholds,
    unassigned: Sequence[str] = (),
) -> tuple[str, ...]:
    """Apply every rule, then append sustainability advice without duplicates."""
    messages = []
    for rule in RULES:
        message = rule(context, routes, vehicle, thresholds)
        if message:
            messages.append(message)

    if unassigned:
        messages.append(
            f"{len(unassigned)} destination(s) could not be assigned to this vehicle "
            f"({', '.join(unassigned)}); schedule an additional vehicle"
        )

    for route in routes:
        for message in route.sustainability.recommendations:
            if message not in messages:
                messages.append(message)

    return tuple(messages)
