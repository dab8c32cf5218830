"""Celery application factory following Factory Pattern."""
import logging
import sys

from celery import Celery

from nearme.config.settings import Config

# Worker logs go to stdout like the web process
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)


def create_celery_app(app=None) -> Celery:
    """
    Create and configure Celery application.

    Args:
        app: Optional Flask app instance

    Returns:
        Configured Celery instance
    """
    celery = Celery(
        "nearme",
        broker=Config.CELERY_BROKER_URL,
        backend=Config.CELERY_RESULT_BACKEND,
        include=["nearme.tasks.engagement_tasks"],
    )

    celery.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_time_limit=60,
        task_soft_time_limit=45,
        worker_prefetch_multiplier=4,
        worker_max_tasks_per_child=1000,
        task_acks_late=True,
        # Engagement writes are fire-and-forget
        task_ignore_result=True,
        broker_connection_retry_on_startup=True,
        broker_connection_timeout=2,
        # Fail fast so the web process can fall back to inline tracking
        task_publish_retry=False,
        worker_hijack_root_logger=False,
    )

    if app:
        celery.conf.update(app.config.get("CELERY", {}))

    return celery


celery_app = create_celery_app()
