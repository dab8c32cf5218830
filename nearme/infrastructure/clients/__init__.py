"""External transport clients."""
from nearme.infrastructure.clients.backend_http_client import BackendHTTPClient

__all__ = ["BackendHTTPClient"]
