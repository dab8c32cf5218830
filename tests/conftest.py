"""
Pytest configuration and shared fixtures.

Provides an app wired to the bundled JSON fixture, a test client, and
helpers for faking backend HTTP responses.
"""
import json
import os
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest

# Set test environment variables before imports
os.environ.setdefault("FLASK_ENV", "testing")
os.environ.setdefault("DATA_PROVIDER", "json")

from nearme import create_app  # noqa: E402
from nearme.config.settings import TestingConfig  # noqa: E402
from nearme.infrastructure.providers.fixture_provider import FixtureProvider  # noqa: E402


@pytest.fixture
def app():
    """Flask app serving the bundled fixture."""
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def container(app):
    return app.config["service_container"]


@pytest.fixture
def fixture_provider() -> FixtureProvider:
    return FixtureProvider()


def make_response(status_code: int = 200, body: Optional[Any] = None, text: Optional[str] = None) -> MagicMock:
    """Build a fake ``requests.Response``."""
    response = MagicMock()
    response.status_code = status_code
    if text is not None:
        response.text = text
        response.json.side_effect = ValueError("not json")
    elif body is None:
        response.text = ""
        response.json.side_effect = ValueError("empty body")
    else:
        response.text = json.dumps(body)
        response.json.return_value = body
    return response
