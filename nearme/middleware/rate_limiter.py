"""Rate limiting middleware using Flask-Limiter."""
import logging

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


logger = logging.getLogger(__name__)

DEFAULT_LIMITS = ["1000 per hour", "100 per minute"]
# Write endpoints get a tighter budget on top of the defaults
SUBMISSION_LIMIT = "10 per minute"


def create_rate_limiter(app) -> Limiter:
    """
    Create and configure Flask-Limiter instance.

    Limits are keyed by client IP and stored in Redis, falling back to
    process memory when Redis is unreachable.

    Args:
        app: Flask application instance

    Returns:
        Configured Limiter instance
    """
    enabled = app.config.get("RATELIMIT_ENABLED", True)
    storage_uri = app.config.get("RATELIMIT_STORAGE_URL") if enabled else "memory://"

    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=DEFAULT_LIMITS,
        storage_uri=storage_uri or "memory://",
        strategy="fixed-window",
        headers_enabled=True,
        in_memory_fallback_enabled=True,
        swallow_errors=True,
        enabled=enabled,
    )

    if enabled:
        logger.info("Rate limiting enabled")
    else:
        logger.info("Rate limiting disabled")
    return limiter
