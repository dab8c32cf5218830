"""Celery tasks for writing engagement events in the background."""
import logging
from typing import Any, Dict, Optional

from celery import Task

from nearme.domain.entities.business import EngagementEvent
from nearme.infrastructure.celery_app import celery_app
from nearme.infrastructure.service_container import ServiceContainer


logger = logging.getLogger(__name__)

_worker_container: Optional[ServiceContainer] = None


def get_worker_container() -> ServiceContainer:
    """Container owned by this worker process, built on first task."""
    global _worker_container
    if _worker_container is None:
        _worker_container = ServiceContainer()
    return _worker_container


class CallbackTask(Task):
    """Task base class logging failures."""

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Handle task failure."""
        logger.error(f"Task {task_id} failed: {exc}", exc_info=einfo)


@celery_app.task(
    bind=True,
    base=CallbackTask,
    name="nearme.track_engagement",
)
def track_engagement_task(self, event_payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Write an engagement event through the configured provider.

    The provider's ``track_engagement`` swallows backend failures, so
    there is nothing to retry; malformed payloads are dropped.

    Args:
        self: Task instance (bound task)
        event_payload: Output of ``EngagementEvent.to_payload``

    Returns:
        Status dictionary
    """
    try:
        event = EngagementEvent.from_payload(event_payload)
    except ValueError as e:
        logger.warning(f"Dropping malformed engagement payload: {e}")
        return {"status": "dropped"}

    get_worker_container().get_provider().track_engagement(event)
    logger.debug(f"Engagement event {event.event_type} tracked for {event.business_id}")
    return {"status": "success"}
