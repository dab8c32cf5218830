"""Monitoring and metrics middleware using Prometheus."""
import functools
import logging
import time
from typing import Callable

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from nearme.config.settings import Config
from nearme.domain.exceptions import BackendUnavailable, QueryFailed

logger = logging.getLogger(__name__)

# Prometheus metrics
world_requests_total = Counter(
    'nearme_world_requests_total',
    'Total number of page requests by selected world',
    ['world']
)

provider_queries_total = Counter(
    'nearme_provider_queries_total',
    'Total number of data provider calls',
    ['backend', 'operation', 'status']
)

provider_query_duration = Histogram(
    'nearme_provider_query_duration_seconds',
    'Time spent in data provider calls',
    ['backend', 'operation'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

engagement_tracking_failures_total = Counter(
    'nearme_engagement_tracking_failures_total',
    'Engagement events that could not be written',
    ['backend']
)


def register_metrics_middleware(app) -> None:
    """
    Register Prometheus metrics endpoint.

    Args:
        app: Flask application instance
    """
    if not app.config.get("ENABLE_METRICS", Config.ENABLE_METRICS):
        return

    @app.route('/metrics')
    def metrics():
        """Prometheus metrics endpoint."""
        return generate_latest(), 200, {'Content-Type': CONTENT_TYPE_LATEST}

    logger.info("Prometheus metrics enabled at /metrics")


def track_provider_query(operation: str):
    """
    Decorator to track data provider call metrics.

    Labels the call with the provider's ``kind`` and an outcome of
    ``success``, ``unavailable`` or ``failed``.

    Args:
        operation: Operation name for metrics
    """
    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            status = "success"
            try:
                return f(self, *args, **kwargs)
            except BackendUnavailable:
                status = "unavailable"
                raise
            except QueryFailed:
                status = "failed"
                raise
            except Exception:
                status = "error"
                raise
            finally:
                _observe_query(getattr(self, "kind", "unknown"), operation, status, time.time() - start_time)
        return wrapper
    return decorator


def _observe_query(backend: str, operation: str, status: str, duration: float) -> None:
    try:
        if Config.ENABLE_METRICS:
            provider_queries_total.labels(backend=backend, operation=operation, status=status).inc()
            provider_query_duration.labels(backend=backend, operation=operation).observe(duration)
    except Exception as e:
        # Don't fail if metrics tracking fails
        logger.debug(f"Failed to track provider query metrics: {e}")


def track_world_selection(world: str) -> None:
    """
    Track which world served a request.

    Args:
        world: World identifier
    """
    try:
        if Config.ENABLE_METRICS:
            world_requests_total.labels(world=world).inc()
    except Exception as e:
        # Don't fail if metrics tracking fails
        logger.debug(f"Failed to track world selection metrics: {e}")


def track_engagement_failure(backend: str) -> None:
    """
    Track a swallowed engagement write failure.

    Args:
        backend: Provider kind
    """
    try:
        if Config.ENABLE_METRICS:
            engagement_tracking_failures_total.labels(backend=backend).inc()
    except Exception as e:
        # Don't fail if metrics tracking fails
        logger.debug(f"Failed to track engagement failure metrics: {e}")
