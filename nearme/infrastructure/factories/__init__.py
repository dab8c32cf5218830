"""Factories for creating provider instances (Factory Pattern)."""

from nearme.infrastructure.factories.provider_factory import ProviderConfig, ProviderFactory

__all__ = [
    "ProviderConfig",
    "ProviderFactory",
]
