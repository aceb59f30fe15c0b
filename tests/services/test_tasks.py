"""Tests for Celery tasks, run eagerly in-process."""
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from route_engine.core.exceptions import RequestValidationError
from route_engine.models.enums import SolverAlgorithm
from route_engine.services import tasks
from route_engine.services.engine import RouteEngine
from route_engine.services.persistence import InMemoryRouteRepository
from route_engine.services.results import to_payload
from route_engine.services.solver import nearest_neighbor


@pytest.fixture
def repository():
    return InMemoryRouteRepository()


@pytest.fixture
def db_engine(monkeypatch):
    fake = MagicMock()
    fake.dispose = AsyncMock()
    monkeypatch.setattr(tasks, "db_engine", fake)
    return fake


@pytest.fixture
def patched_engine(monkeypatch, engine_config, repository, db_engine):
    def build(settings):
        return RouteEngine(
            config=engine_config,
            repository=repository,
            solvers={SolverAlgorithm.NEAREST_NEIGHBOR: nearest_neighbor.solve},
        )

    monkeypatch.setattr(RouteEngine, "from_settings", staticmethod(build))


class TestRunRouteOptimization:

    def test_returns_json_payload(self, patched_engine, db_engine, make_request):
        payload = to_payload(make_request())

        result = tasks.run_route_optimization.apply(args=[payload]).get()

        assert result["request_id"] == "req-1"
        assert result["summary"]["total_routes"] == 1
        assert result["summary"]["selected_algorithm"] == "nearest_neighbor"
        db_engine.dispose.assert_awaited_once()

    def test_save_as(self, patched_engine, repository, make_request):
        payload = to_payload(make_request())
        result = tasks.run_route_optimization.apply(
            args=[payload], kwargs={"save_as": {"name": "Daily", "owner": "alice"}},
        ).get()
        assert result["saved_route_id"] is not None

    def test_invalid_request_raises(self, patched_engine, db_engine):
        with pytest.raises(RequestValidationError):
            tasks.run_route_optimization.apply(args=[{"request_id": "bad"}]).get()
        db_engine.dispose.assert_awaited_once()


class TestHandleRouteEvent:

    def test_logs_event(self, caplog):
        with caplog.at_level(logging.INFO, logger="route_engine.services.tasks"):
            tasks.handle_route_event.apply(args=["route.optimization.completed", {"request_id": "req-1"}])
        assert "route.optimization.completed" in caplog.text
