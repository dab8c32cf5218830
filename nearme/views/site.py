"""Catch-all page route: host -> world -> page payload."""
import logging

from flask import Blueprint, jsonify, request

from nearme.views import get_container, request_subdomain_info

site_blueprint = Blueprint("site", __name__)
_logger = logging.getLogger(__name__)


@site_blueprint.route("/", defaults={"path": ""}, methods=["GET"])
@site_blueprint.route("/<path:path>", methods=["GET"])
def world_page(path: str):
    """
    Serve the page for the request host and path.

    Provider errors propagate to the app's error handlers.
    """
    subdomain_info = request_subdomain_info()
    container = get_container()
    _logger.debug(f"Page request {request.host}{request.path} -> {subdomain_info}")

    payload, status = container.get_world_router().dispatch(
        subdomain_info, request.path, container.get_provider()
    )
    return jsonify(payload), status
