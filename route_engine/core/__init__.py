"""
Core package for the route engine.
"""
from route_engine.core.config import EngineConfig, Settings, settings, get_settings
from route_engine.core.celery_app import celery_app

__all__ = ["EngineConfig", "Settings", "settings", "get_settings", "celery_app"]
