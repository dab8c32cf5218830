"""Domain exceptions for the directory core.

Hostname parsing never raises; the parser always degrades to the default
world. Everything else a page can observe from the data layer derives from
``DirectoryError``.
"""
from typing import Optional


class DirectoryError(Exception):
    """Base class for directory data-access errors."""


class BackendUnavailable(DirectoryError):
    """The backend transport could not be reached (connection error, timeout)."""

    def __init__(self, message: str, backend: Optional[str] = None):
        super().__init__(message)
        self.backend = backend


class QueryFailed(DirectoryError):
    """The backend answered but rejected the request (bad SQL, missing table, policy)."""

    def __init__(self, message: str, backend: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.backend = backend
        self.status_code = status_code


class ConfigurationError(DirectoryError):
    """An unimplemented or incompletely configured backend was requested."""


class TrackingFailure(DirectoryError):
    """An engagement event could not be written. Never escapes ``track_engagement``."""
