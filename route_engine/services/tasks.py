"""
Celery tasks for the route engine.

run_route_optimization runs a full optimization in a worker;
handle_route_event consumes the completion events the orchestrator
publishes through CeleryEventSink.
"""
import asyncio
import logging
from typing import Any, Optional

from route_engine.core.celery_app import celery_app
from route_engine.core.config import settings
from route_engine.core.exceptions import RouteEngineError
from route_engine.db.database import engine as db_engine
from route_engine.services.engine import RouteEngine
from route_engine.services.results import OptimizationResult, to_payload

logger = logging.getLogger(__name__)


async def _optimize(request_payload: dict, save_as: Optional[dict]) -> OptimizationResult:
    route_engine = RouteEngine.from_settings(settings)
    try:
        return await route_engine.optimize_routes(request_payload, save_as=save_as)
    finally:
        # Pooled connections are bound to this task's event loop
        await db_engine.dispose()


@celery_app.task(
    bind=True,
    name="route_engine.services.tasks.run_route_optimization",
    queue="optimization",
)
def run_route_optimization(
    self,
    request_payload: dict,
    save_as: Optional[dict] = None,
) -> dict:
    """
    Run one route optimization as a Celery task.

    Args:
        request_payload: OptimizationRequest as a JSON-compatible dict
        save_as: Optional SaveRouteRequest dict; persists the selected route

    Returns:
        The OptimizationResult as a JSON-compatible dict
    """
    request_id = request_payload.get("request_id") if isinstance(request_payload, dict) else None
    logger.info(f"Starting optimization task {self.request.id} (request {request_id})")

    try:
        result = asyncio.run(_optimize(request_payload, save_as))
    except RouteEngineError as e:
        logger.error(f"Optimization task {self.request.id} failed: {e}")
        raise

    logger.info(
        f"Optimization task {self.request.id} completed: "
        f"{result.summary.total_routes} route(s), cost {result.summary.total_cost:.2f}"
    )
    return to_payload(result)


@celery_app.task(
    name="route_engine.services.tasks.handle_route_event",
    queue="events",
    ignore_result=True,
)
def handle_route_event(event_name: str, payload: dict[str, Any]) -> None:
    """Consume a route event. Downstream integrations hook in here."""
    logger.info(f"Received event {event_name}: {payload}")
