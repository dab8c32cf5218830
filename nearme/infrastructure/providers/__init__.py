"""Data provider implementations."""
from nearme.infrastructure.providers.base_provider import BaseDataProvider
from nearme.infrastructure.providers.fixture_provider import FixtureProvider
from nearme.infrastructure.providers.edge_query_provider import EdgeQueryProvider
from nearme.infrastructure.providers.hosted_relational_provider import HostedRelationalProvider

__all__ = [
    "BaseDataProvider",
    "FixtureProvider",
    "EdgeQueryProvider",
    "HostedRelationalProvider",
]
