"""HTTP views (Flask blueprints)."""
from flask import current_app, request

from nearme.domain.entities.subdomain import SubdomainInfo
from nearme.infrastructure.service_container import ServiceContainer
from nearme.utils.hostname_parser import HostnameParser


def get_container() -> ServiceContainer:
    """Service container of the current app."""
    return current_app.config["service_container"]


def request_hostname() -> str:
    """
    Hostname the request was addressed to.

    ``X-Forwarded-Host`` wins when the app sits behind a trusted proxy. In
    debug and testing, ``?subdomain=water-refill`` stands in for
    ``water-refill.{ROOT_DOMAIN}``.
    """
    override = request.args.get("subdomain")
    if override and (current_app.config.get("DEBUG") or current_app.config.get("TESTING")):
        return f"{override}.{current_app.config['ROOT_DOMAIN']}"

    if current_app.config.get("TRUST_FORWARDED_HOST"):
        forwarded = request.headers.get("X-Forwarded-Host", "")
        if forwarded:
            return forwarded.split(",")[0].strip()

    return request.host


def request_subdomain_info() -> SubdomainInfo:
    return HostnameParser.parse(request_hostname(), request.path, current_app.config["ROOT_DOMAIN"])
