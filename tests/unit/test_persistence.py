"""Tests for saved-route repositories."""
import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from route_engine.core.exceptions import PersistenceError
from route_engine.models.saved_route import SavedRouteRecord
from route_engine.services.persistence import (
    InMemoryRouteRepository,
    SavedRoute,
    SqlAlchemyRouteRepository,
)

PAYLOAD = {"route_id": "route-1", "total_distance": 12.5}


def _db_error():
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.fixture
def repository():
    return InMemoryRouteRepository()


class TestInMemoryRepository:

    async def test_save_and_get(self, repository):
        route_id = await repository.save_route(PAYLOAD, "Morning run", "Downtown", "alice")
        saved = await repository.get_saved_route(route_id)
        assert saved.name == "Morning run"
        assert saved.owner == "alice"
        assert saved.payload == PAYLOAD
        assert saved.usage_count == 0

    async def test_filter_by_owner_and_search(self, repository):
        await repository.save_route(PAYLOAD, "Morning run", "Downtown", "alice")
        await repository.save_route(PAYLOAD, "Evening run", "Harbour loop", "bob")
        await repository.save_route(PAYLOAD, "Weekend", "harbour special", "alice")

        assert len(await repository.get_saved_routes(owner="alice")) == 2
        names = {r.name for r in await repository.get_saved_routes(search="HARBOUR")}
        assert names == {"Evening run", "Weekend"}
        found = await repository.get_saved_routes(search="harbour", owner="alice")
        assert [r.name for r in found] == ["Weekend"]

    async def test_delete(self, repository):
        route_id = await repository.save_route(PAYLOAD, "Run", None, "alice")
        assert await repository.delete_saved_route(route_id) is True
        assert await repository.delete_saved_route(route_id) is False
        assert await repository.get_saved_route(route_id) is None

    async def test_reassign(self, repository):
        route_id = await repository.save_route(PAYLOAD, "Run", None, "alice")
        moved = await repository.reassign_saved_route(route_id, "bob")
        assert moved.owner == "bob"
        assert await repository.get_saved_routes(owner="alice") == []

    async def test_record_usage_increments(self, repository):
        route_id = await repository.save_route(PAYLOAD, "Run", None, "alice")
        await repository.record_usage(route_id)
        used = await repository.record_usage(route_id)
        assert used.usage_count == 2

    async def test_unknown_route_raises(self, repository):
        with pytest.raises(PersistenceError):
            await repository.record_usage("missing")


def _record(**overrides) -> SavedRouteRecord:
    fields = dict(
        id=uuid.uuid4(),
        name="Run",
        description=None,
        owner="alice",
        payload=PAYLOAD,
        usage_count=0,
    )
    fields.update(overrides)
    return SavedRouteRecord(**fields)


def _returning(record):
    result = MagicMock()
    result.scalar_one_or_none.return_value = record
    return result


class TestSqlAlchemyRepository:

    async def test_save_route_returns_generated_id(self, session_factory, mock_session):
        generated = uuid.uuid4()

        async def assign_id():
            record = mock_session.add.call_args.args[0]
            record.id = generated

        mock_session.flush.side_effect = assign_id
        repository = SqlAlchemyRouteRepository(session_factory)

        route_id = await repository.save_route(PAYLOAD, "Run", "Downtown", "alice")

        assert route_id == str(generated)
        record = mock_session.add.call_args.args[0]
        assert isinstance(record, SavedRouteRecord)
        assert record.payload == PAYLOAD
        assert record.owner == "alice"
        mock_session.commit.assert_awaited_once()

    async def test_save_failure_maps_to_persistence_error(self, session_factory, mock_session):
        mock_session.commit.side_effect = _db_error()
        repository = SqlAlchemyRouteRepository(session_factory)
        with pytest.raises(PersistenceError):
            await repository.save_route(PAYLOAD, "Run", None, "alice")

    async def test_list_routes(self, session_factory, mock_session):
        result = MagicMock()
        result.scalars.return_value.all.return_value = [_record(name="A"), _record(name="B")]
        mock_session.execute.return_value = result
        repository = SqlAlchemyRouteRepository(session_factory)

        routes = await repository.get_saved_routes(search="a", owner="alice")

        assert [r.name for r in routes] == ["A", "B"]
        assert all(isinstance(r, SavedRoute) for r in routes)
        mock_session.execute.assert_awaited_once()

    async def test_get_missing_returns_none(self, session_factory):
        repository = SqlAlchemyRouteRepository(session_factory)
        assert await repository.get_saved_route(str(uuid.uuid4())) is None

    async def test_invalid_id_rejected(self, session_factory, mock_session):
        repository = SqlAlchemyRouteRepository(session_factory)
        with pytest.raises(PersistenceError):
            await repository.get_saved_route("not-a-uuid")
        mock_session.get.assert_not_awaited()

    async def test_delete_reports_rowcount(self, session_factory, mock_session):
        mock_session.execute.return_value = SimpleNamespace(rowcount=1)
        repository = SqlAlchemyRouteRepository(session_factory)
        assert await repository.delete_saved_route(str(uuid.uuid4())) is True
        mock_session.commit.assert_awaited_once()

    async def test_record_usage_increments_in_database(self, session_factory, mock_session):
        record = _record(usage_count=4)
        mock_session.execute.return_value = _returning(record)
        repository = SqlAlchemyRouteRepository(session_factory)

        saved = await repository.record_usage(str(record.id))

        assert saved.usage_count == 4
        statement = str(mock_session.execute.call_args.args[0])
        assert statement.startswith("UPDATE saved_routes")
        assert "saved_routes.usage_count +" in statement
        assert "RETURNING" in statement
        mock_session.get.assert_not_awaited()
        mock_session.commit.assert_awaited_once()

    async def test_record_usage_missing_raises(self, session_factory, mock_session):
        mock_session.execute.return_value = _returning(None)
        repository = SqlAlchemyRouteRepository(session_factory)
        with pytest.raises(PersistenceError, match="not found"):
            await repository.record_usage(str(uuid.uuid4()))
        mock_session.commit.assert_not_awaited()

    async def test_reassign(self, session_factory, mock_session):
        record = _record(owner="bob")
        mock_session.execute.return_value = _returning(record)
        repository = SqlAlchemyRouteRepository(session_factory)
        assert (await repository.reassign_saved_route(str(record.id), "bob")).owner == "bob"
        mock_session.get.assert_not_awaited()

    async def test_update_missing_raises(self, session_factory, mock_session):
        mock_session.execute.return_value = _returning(None)
        repository = SqlAlchemyRouteRepository(session_factory)
        with pytest.raises(PersistenceError):
            await repository.reassign_saved_route(str(uuid.uuid4()), "bob")

    async def test_query_failure_maps_to_persistence_error(self, session_factory, mock_session):
        mock_session.execute.side_effect = _db_error()
        repository = SqlAlchemyRouteRepository(session_factory)
        with pytest.raises(PersistenceError):
            await repository.get_saved_routes()
