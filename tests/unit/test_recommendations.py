"""Tests for the rule-based recommendation generator."""
from dataclasses import replace

import pytest

from route_engine.core.config import RecommendationThresholds
from route_engine.models.enums import IncidentSeverity, IncidentType, RoadCondition
from route_engine.services.context import FuelPrices, TrafficIncident
from route_engine.services.recommendations import generate_recommendations


@pytest.fixture
def thresholds():
    return RecommendationThresholds()


class TestRecommendations:

    def test_calm_conditions_no_messages(self, default_context, vehicle, thresholds):
        assert generate_recommendations(default_context, [], vehicle, thresholds) == ()

    def test_congestion(self, make_context, vehicle, thresholds):
        messages = generate_recommendations(make_context(congestion_level=0.85), [], vehicle, thresholds)
        assert len(messages) == 1
        assert "congestion" in messages[0]

    def test_congestion_at_threshold_does_not_fire(self, make_context, vehicle, thresholds):
        assert generate_recommendations(make_context(congestion_level=0.7), [], vehicle, thresholds) == ()

    def test_severe_road(self, make_context, vehicle, thresholds):
        messages = generate_recommendations(make_context(road_condition=RoadCondition.ICY), [], vehicle, thresholds)
        assert "icy" in messages[0]

    def test_fuel_price(self, make_context, vehicle, thresholds):
        context = make_context(fuel_prices=FuelPrices(diesel=26.0, gasoline=24.0, electric=1.8))
        messages = generate_recommendations(context, [], vehicle, thresholds)
        assert messages[0].startswith("Diesel price 26.00")

    def test_rules_co_fire(self, make_context, vehicle, thresholds):
        incident = TrafficIncident(IncidentType.ACCIDENT, 40.75, -73.99, IncidentSeverity.HIGH)
        context = make_context(
            congestion_level=0.9,
            road_condition=RoadCondition.SNOWY,
            is_rush_hour=True,
            incidents=(incident,),
            weather_warnings=("Blizzard",),
            is_stale=True,
        )
        messages = generate_recommendations(context, [], vehicle, thresholds)
        assert len(messages) == 6

    def test_low_incident_severity_ignored(self, make_context, vehicle, thresholds):
        incident = TrafficIncident(IncidentType.CONSTRUCTION, 40.75, -73.99, IncidentSeverity.LOW)
        assert generate_recommendations(make_context(incidents=(incident,)), [], vehicle, thresholds) == ()

    def test_unassigned_destinations(self, default_context, vehicle, thresholds):
        messages = generate_recommendations(default_context, [], vehicle, thresholds, unassigned=("d9",))
        assert "d9" in messages[0]

    def test_low_route_efficiency(self, default_context, vehicle, outcome):
        thresholds = RecommendationThresholds(low_route_efficiency=1.01)
        messages = generate_recommendations(default_context, [outcome], vehicle, thresholds)
        assert any("efficiency" in m for m in messages)

    def test_sustainability_messages_not_duplicated(self, default_context, vehicle, thresholds, outcome):
        advice = "Consider using an electric or hybrid vehicle for this route"
        noisy = replace(outcome, sustainability=replace(outcome.sustainability, recommendations=(advice,)))
        messages = generate_recommendations(default_context, [noisy, noisy], vehicle, thresholds)
        assert messages.count(advice) == 1
