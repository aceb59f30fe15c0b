"""Tests for route_engine.models.enums -- ordering and derived properties."""
from route_engine.models.enums import (
    ComparisonCriterion,
    Priority,
    RoadCondition,
    SolverAlgorithm,
)


class TestPriority:

    def test_high_admitted_first(self):
        assert Priority.HIGH.rank < Priority.MEDIUM.rank < Priority.LOW.rank

    def test_values_are_lowercase(self):
        assert Priority("high") is Priority.HIGH


class TestRoadCondition:

    def test_icy_and_snowy_are_severe(self):
        assert RoadCondition.ICY.is_severe
        assert RoadCondition.SNOWY.is_severe

    def test_dry_and_wet_not_severe(self):
        assert not RoadCondition.DRY.is_severe
        assert not RoadCondition.WET.is_severe


class TestSolverAlgorithm:

    def test_declaration_order(self):
        assert list(SolverAlgorithm) == [
            SolverAlgorithm.NEAREST_NEIGHBOR,
            SolverAlgorithm.SAVINGS,
            SolverAlgorithm.SIMULATED_ANNEALING,
            SolverAlgorithm.GENETIC,
            SolverAlgorithm.ANT_COLONY,
        ]


class TestComparisonCriterion:

    def test_higher_is_better(self):
        assert ComparisonCriterion.EFFICIENCY.higher_is_better
        assert ComparisonCriterion.FEASIBILITY.higher_is_better

    def test_lower_is_better(self):
        for criterion in (
            ComparisonCriterion.COST,
            ComparisonCriterion.DURATION,
            ComparisonCriterion.DISTANCE,
            ComparisonCriterion.EMISSIONS,
        ):
            assert not criterion.higher_is_better
