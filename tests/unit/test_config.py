"""Tests for Settings and EngineConfig."""
import subprocess
import sys
from dataclasses import replace

import pytest
from pydantic import ValidationError

from route_engine.core.config import (
    CostRates,
    EngineConfig,
    Settings,

    TimeFactorRules,    get_settings,
)


class TestSettings:

    def test_defaults(self, test_settings):
        assert test_settings.feasibility_threshold == 0.8
        assert test_settings.baseline_cost_multiplier == 1.2
        assert test_settings.realtime_provider_url is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SOLVER_TIMEOUT_SECONDS", "4")
        monkeypatch.setenv("FEASIBILITY_THRESHOLD", "0.9")
        settings = get_settings()
        assert settings.solver_timeout_seconds == 4.0
        assert settings.feasibility_threshold == 0.9

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_multiplier_below_one_rejected(self):
        with pytest.raises(ValidationError):
            Settings(baseline_cost_multiplier=0.9)

    def test_threshold_above_one_rejected(self):
        with pytest.raises(ValidationError):
            Settings(feasibility_threshold=1.5)

    def test_unknown_time_zone_rejected(self):
        with pytest.raises(ValidationError):
            Settings(local_timezone="Nowhere/Special")


class TestEngineConfig:

    def test_from_settings(self):
        settings = Settings(
            solver_timeout_seconds=10,
            optimization_deadline_seconds=30,
            feasibility_threshold=0.7,
            baseline_cost_multiplier=1.5,
            random_seed=7,
        )
        config = EngineConfig.from_settings(settings)
        assert config.optimization_deadline_seconds == 30
        assert config.feasibility_threshold == 0.7
        assert config.solver.timeout_seconds == 10
        assert config.solver.search_time_limit_seconds == pytest.approx(8.0)
        assert config.solver.savings_time_limit_seconds == 5
        assert config.solver.random_seed == 7
        assert config.cost.baseline_cost_multiplier == 1.5
        assert config.time_factors == TimeFactorRules()

    def test_local_timezone_reaches_time_factors(self):
        config = EngineConfig.from_settings(Settings(local_timezone="Europe/Amsterdam"))
        assert config.time_factors.local_timezone == "Europe/Amsterdam"

    def test_savings_limit_at_least_one_second(self):
        config = EngineConfig.from_settings(Settings(solver_timeout_seconds=0.5))
        assert config.solver.savings_time_limit_seconds == 1

    def test_immutable(self):
        config = EngineConfig()
        with pytest.raises(AttributeError):
            config.feasibility_threshold = 0.5

    def test_replace_overrides(self):
        config = replace(EngineConfig(), feasibility_threshold=0.95)
        assert config.feasibility_threshold == 0.95

    def test_cost_multiplier_below_one_rejected(self):
        with pytest.raises(ValueError):
            CostRates(baseline_cost_multiplier=0.5)


def _import_in_fresh_interpreter(source: str) -> subprocess.CompletedProcess:
    return subprocess.run([sys.executable, "-c", source], capture_output=True, text=True, timeout=60)


class TestImportOrder:

    @pytest.mark.parametrize("module", [
        "route_engine.core.config",
        "route_engine.models",
        "route_engine.schemas",
    ])
    def test_imports_without_loading_database(self, module):
        result = _import_in_fresh_interpreter(
            f"import sys, {module}\n"
            "assert 'route_engine.db.database' not in sys.modules, sorted(sys.modules)\n"
        )
        assert result.returncode == 0, result.stderr

    def test_saved_route_model_imports_first(self):
        result = _import_in_fresh_interpreter(
            "from route_engine.models.saved_route import SavedRouteRecord\n"
            "assert SavedRouteRecord.__tablename__ == 'saved_routes'\n"
        )
        assert result.returncode == 0, result.stderr
