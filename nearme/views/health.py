"""Health check endpoints."""
import logging

from flask import Blueprint, jsonify

from nearme.domain.exceptions import DirectoryError
from nearme.infrastructure.redis_client import RedisClientFactory
from nearme.views import get_container

health_blueprint = Blueprint("health", __name__)
_logger = logging.getLogger(__name__)


@health_blueprint.route("/health", methods=["GET"])
def health_check():
    """
    Basic health check endpoint.

    Returns:
        JSON response with health status
    """
    return jsonify({
        "status": "healthy",
        "service": "nearme"
    }), 200


@health_blueprint.route("/health/ready", methods=["GET"])
def readiness_check():
    """
    Readiness check endpoint (checks dependencies).

    The data provider must answer a category query. Redis is reported but
    optional, since the app degrades to running without the cache.

    Returns:
        JSON response with readiness status
    """
    checks = {
        "provider": False,
        "redis": False,
        "overall": False
    }

    try:
        get_container().get_provider().get_categories()
        checks["provider"] = True
    except DirectoryError as e:
        _logger.error(f"Provider health check failed: {e}")

    checks["redis"] = RedisClientFactory.get_client() is not None

    checks["overall"] = checks["provider"]
    status_code = 200 if checks["overall"] else 503

    return jsonify({
        "status": "ready" if checks["overall"] else "not_ready",
        "backend": get_container().provider_factory.get_config().type,
        "checks": checks
    }), status_code


@health_blueprint.route("/health/live", methods=["GET"])
def liveness_check():
    """
    Liveness check endpoint (for Kubernetes).

    Returns:
        JSON response with liveness status
    """
    return jsonify({
        "status": "alive",
        "service": "nearme"
    }), 200
