"""
Celery application configuration for the route engine.

Celery runs optimization requests off the caller's thread and carries the
fire-and-forget completion events published by the orchestrator.

Usage:
    # Start worker (from project root):
    celery -A route_engine.core.celery_app worker --loglevel=info -Q optimization,events
"""
from celery import Celery
from celery.signals import after_setup_logger

from route_engine.core.config import settings
from route_engine.core.logging import configure_logging

OPTIMIZATION_QUEUE = "optimization"
EVENTS_QUEUE = "events"

celery_app = Celery(
    "route_engine",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["route_engine.services.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    enable_utc=True,
    # A lost worker re-queues its optimization instead of dropping it
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    result_expires=24 * 3600,
    # Solvers are CPU bound; never prefetch a second run
    worker_prefetch_multiplier=1,
    task_routes={
        "route_engine.services.tasks.run_route_optimization": {"queue": OPTIMIZATION_QUEUE},
        "route_engine.services.tasks.handle_route_event": {"queue": EVENTS_QUEUE},
    },
    task_queues={
        name: {"exchange": name, "routing_key": name}
        for name in (OPTIMIZATION_QUEUE, EVENTS_QUEUE)
    },
    # The orchestrator enforces its own deadline; these only catch a hung worker
    task_soft_time_limit=int(settings.optimization_deadline_seconds) + 30,
    task_time_limit=int(settings.optimization_deadline_seconds) + 60,
)


@after_setup_logger.connect
def _setup_worker_logging(logger, *args, **kwargs):
    configure_logging(settings.log_level)
