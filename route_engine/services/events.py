"""
Event sinks for fire-and-forget notifications.

The orchestrator publishes route.optimization.completed when a run
finishes. Publishing failures are logged by the caller and never fail
the optimization.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)

ROUTE_OPTIMIZATION_COMPLETED = "route.optimization.completed"

EVENT_TASK_NAME = "route_engine.services.tasks.handle_route_event"


class EventSink(ABC):
    """Abstract notification boundary."""

    @abstractmethod
    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        """Publish an event. May raise; callers decide how to recover."""


class LoggingEventSink(EventSink):
    """Writes events to the log. Default when no broker is configured."""

    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        logger.info(f"Event {event_name}: {payload}")


class CeleryEventSink(EventSink):
    """
    Sends events to the Celery 'events' queue.

    Consumed by the handle_route_event task.
    """

    def __init__(self, app=None, queue: str = "events"):
        if app is None:
            from route_engine.core.celery_app import celery_app
            app = celery_app
        self.app = app
        self.queue = queue

    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        self.app.send_task(EVENT_TASK_NAME, args=[event_name, payload], queue=self.queue)
        logger.debug(f"Queued event {event_name} on '{self.queue}'")


def completion_payload(
    request_id: str,
    total_destinations: int,
    total_routes: int,
    total_cost: float,
    average_efficiency: float,
    selected_algorithm: Optional[str] = None,
) -> dict[str, Any]:
    return {
        "request_id": request_id,
        "total_destinations": total_destinations,
        "total_routes": total_routes,
        "total_cost": round(total_cost, 2),
        "average_efficiency": round(average_efficiency, 4),
        "selected_algorithm": selected_algorithm,
    }
