"""
Database module for the route engine.
"""
from route_engine.db.database import (
    Base,
    engine,
    async_session_maker,
)

__all__ = [
    "Base",
    "engine",
    "async_session_maker",
]
