"""Flask application factory for the near-me directory."""
import logging
import sys

from flask import Flask

from nearme.config.settings import Config, get_config
from nearme.infrastructure.redis_client import RedisClientFactory
from nearme.infrastructure.service_container import ServiceContainer
from nearme.middleware.error_handler import init_error_handlers
from nearme.middleware.monitoring import register_metrics_middleware
from nearme.middleware.rate_limiter import SUBMISSION_LIMIT, create_rate_limiter
from nearme.views.api import api_blueprint
from nearme.views.health import health_blueprint
from nearme.views.site import site_blueprint


def create_app(config_class=None, service_container: ServiceContainer = None) -> Flask:
    """
    Create and configure Flask application with dependency injection.

    Args:
        config_class: Optional configuration class (for testing)
        service_container: Optional pre-built container (for testing)

    Returns:
        Configured Flask application
    """
    _logger = logging.getLogger(__name__)

    app = Flask(__name__, static_folder=None)

    config = config_class or get_config()
    app.config.from_object(config)

    _configure_logging(config)

    app.register_blueprint(health_blueprint)
    app.register_blueprint(api_blueprint)
    app.register_blueprint(site_blueprint)

    # Missing credentials surface as ConfigurationError on first provider use
    try:
        config.validate()
    except ValueError as e:
        _logger.warning(f"Configuration validation warning: {e}")

    if not config.TESTING:
        _initialize_infrastructure()

    _initialize_middleware(app)

    app.config["service_container"] = service_container or ServiceContainer(config=config)

    _logger.info(f"Application ready - data provider: {config.DATA_PROVIDER}, root domain: {config.ROOT_DOMAIN}")
    return app


def _configure_logging(config=Config) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=logging.DEBUG if config.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


def _initialize_infrastructure() -> None:
    """Warm the Redis pool; the app keeps running without Redis."""
    if RedisClientFactory.get_client():
        logging.info("Infrastructure initialized successfully with Redis")
    else:
        logging.warning("Infrastructure initialized without Redis (settings will not be cached)")


def _initialize_middleware(app: Flask) -> None:
    """
    Initialize middleware (rate limiting, monitoring, error handling).

    Args:
        app: Flask application instance
    """
    limiter = create_rate_limiter(app)
    limiter.exempt(health_blueprint)
    for endpoint in ("api.submit_business", "api.submit_contact"):
        limiter.limit(SUBMISSION_LIMIT)(app.view_functions[endpoint])
    app.config["limiter"] = limiter

    register_metrics_middleware(app)

    init_error_handlers(app)
