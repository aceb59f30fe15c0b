"""
Saved-route persistence.

The engine treats every call as atomic and relies on the storage
backend for consistency; it does no locking of its own.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from route_engine.core.exceptions import PersistenceError
from route_engine.db.database import async_session_maker
from route_engine.models.saved_route import SavedRouteRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavedRoute:
    id: str
    name: str
    owner: str
    payload: dict[str, Any]
    description: Optional[str] = None
    usage_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: SavedRouteRecord) -> "SavedRoute":
        return cls(
            id=str(record.id),
            name=record.name,
            owner=record.owner,
            payload=record.payload,
            description=record.description,
            usage_count=record.usage_count or 0,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class RouteRepository(ABC):
    """Storage collaborator for saved routes."""

    @abstractmethod
    async def save_route(
        self, payload: dict[str, Any], name: str, description: Optional[str], owner: str
    ) -> str:
        """Store a payload and return the new saved-route id."""

    @abstractmethod
    async def get_saved_routes(
        self, search: Optional[str] = None, owner: Optional[str] = None
    ) -> list[SavedRoute]:
        """List saved routes, optionally filtered by owner and a name/description search."""

    @abstractmethod
    async def get_saved_route(self, route_id: str) -> Optional[SavedRoute]:
        """Fetch one saved route, or None."""

    @abstractmethod
    async def delete_saved_route(self, route_id: str) -> bool:
        """Delete a saved route. Returns False when it did not exist."""

    @abstractmethod
    async def reassign_saved_route(self, route_id: str, new_owner: str) -> SavedRoute:
        """Move a saved route to another owner."""

    @abstractmethod
    async def record_usage(self, route_id: str) -> SavedRoute:
        """Increment the usage counter of a saved route."""


class InMemoryRouteRepository(RouteRepository):
    """Process-local repository for tests and single-process tooling."""

    def __init__(self):
        self._routes: dict[str, SavedRoute] = {}

    async def save_route(self, payload, name, description, owner) -> str:
        now = datetime.now(timezone.utc)
        route_id = str(uuid4())
        self._routes[route_id] = SavedRoute(
            id=route_id,
            name=name,
            owner=owner,
            payload=payload,
            description=description,
            created_at=now,
            updated_at=now,
        )
        return route_id

    async def get_saved_routes(self, search=None, owner=None) -> list[SavedRoute]:
        routes = list(self._routes.values())
        if owner is not None:
            routes = [r for r in routes if r.owner == owner]
        if search:
            needle = search.lower()
            routes = [
                r for r in routes
                if needle in r.name.lower() or needle in (r.description or "").lower()
            ]
        return sorted(routes, key=lambda r: r.created_at, reverse=True)

    async def get_saved_route(self, route_id: str) -> Optional[SavedRoute]:
        return self._routes.get(route_id)

    async def delete_saved_route(self, route_id: str) -> bool:
        return self._routes.pop(route_id, None) is not None

    def _require(self, route_id: str) -> SavedRoute:
        route = self._routes.get(route_id)
        if route is None:
            raise PersistenceError(f"Saved route {route_id} not found")
        return route

    async def reassign_saved_route(self, route_id: str, new_owner: str) -> SavedRoute:
        route = replace(self._require(route_id), owner=new_owner, updated_at=datetime.now(timezone.utc))
        self._routes[route_id] = route
        return route

    async def record_usage(self, route_id: str) -> SavedRoute:
        current = self._require(route_id)
        route = replace(current, usage_count=current.usage_count + 1, updated_at=datetime.now(timezone.utc))
        self._routes[route_id] = route
        return route


def _parse_id(route_id: str) -> UUID:
    try:
        return UUID(str(route_id))
    except ValueError as e:
        raise PersistenceError(f"Invalid saved route id: {route_id}") from e


class SqlAlchemyRouteRepository(RouteRepository):
    """
    Repository backed by the saved_routes table.

    Usage:
        repository = SqlAlchemyRouteRepository(async_session_maker)
    """

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or async_session_maker

    async def save_route(self, payload, name, description, owner) -> str:
        try:
            async with self.session_factory() as session:
                record = SavedRouteRecord(
                    name=name,
                    description=description,
                    owner=owner,
                    payload=payload,
                    usage_count=0,
                )
                session.add(record)
                await session.flush()
                route_id = str(record.id)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save route '{name}': {e}")
            raise PersistenceError(f"Failed to save route '{name}': {e}") from e
        logger.info(f"Saved route {route_id} ('{name}') for {owner}")
        return route_id

    async def get_saved_routes(self, search=None, owner=None) -> list[SavedRoute]:
        query = select(SavedRouteRecord)
        if owner is not None:
            query = query.where(SavedRouteRecord.owner == owner)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                SavedRouteRecord.name.ilike(pattern),
                SavedRouteRecord.description.ilike(pattern),
            ))
        query = query.order_by(SavedRouteRecord.created_at.desc())
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return [SavedRoute.from_record(record) for record in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list saved routes: {e}") from e

    async def get_saved_route(self, route_id: str) -> Optional[SavedRoute]:
        key = _parse_id(route_id)
        try:
            async with self.session_factory() as session:
                record = await session.get(SavedRouteRecord, key)
                return SavedRoute.from_record(record) if record is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load saved route {route_id}: {e}") from e

    async def delete_saved_route(self, route_id: str) -> bool:
        key = _parse_id(route_id)
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    delete(SavedRouteRecord).where(SavedRouteRecord.id == key)
                )
                await session.commit()
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete saved route {route_id}: {e}") from e

    async def _update(self, route_id: str, **values) -> SavedRoute:
        """Single UPDATE ... RETURNING; column expressions are evaluated by the database."""
        key = _parse_id(route_id)
        stmt = (
            update(SavedRouteRecord)
            .where(SavedRouteRecord.id == key)
            .values(**values)
            .returning(SavedRouteRecord)
        )
        try:
            async with self.session_factory() as session:
                record = (await session.execute(stmt)).scalar_one_or_none()
                if record is None:
                    raise PersistenceError(f"Saved route {route_id} not found")
                await session.commit()
                return SavedRoute.from_record(record)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update saved route {route_id}: {e}") from e

    async def reassign_saved_route(self, route_id: str, new_owner: str) -> SavedRoute:
        return await self._update(route_id, owner=new_owner)

    async def record_usage(self, route_id: str) -> SavedRoute:
        return await self._update(route_id, usage_count=SavedRouteRecord.usage_count + 1)
