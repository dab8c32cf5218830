"""Service container for dependency injection (IoC Container Pattern)."""
import logging
from typing import Optional

from nearme.config.layered_settings import LayeredSettingsResolver
from nearme.config.settings import Config
from nearme.domain.interfaces.data_provider import IDataProvider
from nearme.domain.interfaces.settings_cache import ISettingsCache
from nearme.infrastructure.factories.provider_factory import ProviderConfig, ProviderFactory
from nearme.infrastructure.repositories.settings_cache import RedisSettingsCache
from nearme.routing.world_router import WorldRouter
from nearme.routing.worlds import create_world_router


class ServiceContainer:
    """
    Holds the per-application services.

    One container is created for each Flask app (and one per Celery worker
    process); nothing here is shared through class or module state, so
    tests can build as many isolated containers as they need.
    """

    def __init__(
        self,
        config=Config,
        provider_factory: Optional[ProviderFactory] = None,
        settings_cache: Optional[ISettingsCache] = None,
    ):
        """
        Initialize service container.

        Args:
            config: Settings class the services are built from
            provider_factory: Optional pre-built factory (Dependency Injection)
            settings_cache: Optional settings cache (defaults to Redis when enabled)
        """
        self._logger = logging.getLogger(__name__)
        self._config = config
        self._provider_factory = provider_factory or ProviderFactory(
            config=ProviderConfig.from_settings(config),
            fixture_path=config.FIXTURE_PATH,
        )
        self._settings_cache = settings_cache
        self._world_router: Optional[WorldRouter] = None
        self._settings_resolver: Optional[LayeredSettingsResolver] = None

    @property
    def provider_factory(self) -> ProviderFactory:
        return self._provider_factory

    def get_provider(self) -> IDataProvider:
        """
        Get the live data provider.

        Raises:
            ConfigurationError: If the configured provider cannot be built
        """
        return self._provider_factory.get_provider()

    def get_world_router(self) -> WorldRouter:
        """Get or create the world router."""
        if self._world_router is None:
            self._world_router = create_world_router()
            self._logger.info("WorldRouter created")
        return self._world_router

    def get_settings_cache(self) -> Optional[ISettingsCache]:
        if self._settings_cache is None and not self._config.TESTING:
            self._settings_cache = RedisSettingsCache(ttl=self._config.SETTINGS_CACHE_TTL)
        return self._settings_cache

    def get_settings_resolver(self) -> LayeredSettingsResolver:
        """Get or create the layered settings resolver."""
        if self._settings_resolver is None:
            self._settings_resolver = LayeredSettingsResolver(
                provider_source=self.get_provider,
                cache=self.get_settings_cache(),
            )
            self._logger.info("LayeredSettingsResolver created")
        return self._settings_resolver

    def reset(self) -> None:
        """Discard the cached provider (the factory keeps its config)."""
        self._provider_factory.reset()
