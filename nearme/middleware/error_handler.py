"""Error handling middleware with Sentry integration."""
import logging

import sentry_sdk
from flask import jsonify
from sentry_sdk.integrations.celery import CeleryIntegration
from sentry_sdk.integrations.flask import FlaskIntegration

from nearme.domain.exceptions import BackendUnavailable, ConfigurationError, QueryFailed

logger = logging.getLogger(__name__)


def init_error_handlers(app) -> None:
    """
    Initialize error handlers for the application.

    Args:
        app: Flask application instance
    """
    sentry_dsn = app.config.get("SENTRY_DSN")
    if sentry_dsn:
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[
                FlaskIntegration(),
                CeleryIntegration(),
            ],
            traces_sample_rate=0.1,
            environment=app.config.get("FLASK_ENV", "production"),
        )
        logger.info("Sentry error tracking initialized")

    @app.errorhandler(BackendUnavailable)
    def backend_unavailable(error):
        """Backend could not be reached; the client may retry."""
        logger.error(f"Backend unavailable ({error.backend}): {error}")
        return jsonify({
            "status": "error",
            "message": "Directory data is temporarily unavailable",
            "retryable": True,
        }), 503

    @app.errorhandler(QueryFailed)
    def query_failed(error):
        """Backend answered but rejected the request."""
        logger.error(f"Query failed ({error.backend}, status={error.status_code}): {error}")
        if error.status_code == 404:
            return jsonify({"status": "error", "message": str(error), "retryable": False}), 404
        return jsonify({
            "status": "error",
            "message": "Directory query failed",
            "retryable": False,
        }), 502

    @app.errorhandler(ConfigurationError)
    def configuration_error(error):
        """Provider cannot be built with the current configuration."""
        logger.critical(f"Configuration error: {error}")
        return jsonify({"status": "error", "message": "Service misconfigured"}), 500

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({"status": "error", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"status": "error", "message": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({"status": "error", "message": "Internal server error"}), 500

    @app.errorhandler(429)
    def rate_limit_error(error):
        """Handle rate limit errors."""
        return jsonify({
            "status": "error",
            "message": "Rate limit exceeded. Please try again later."
        }), 429
