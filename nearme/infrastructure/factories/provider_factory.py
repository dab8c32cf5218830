"""Factory for creating the data provider (Factory Pattern)."""
import dataclasses
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from nearme.config.settings import Config
from nearme.domain.exceptions import ConfigurationError
from nearme.domain.interfaces.data_provider import IDataProvider
from nearme.infrastructure.providers.edge_query_provider import EdgeQueryProvider
from nearme.infrastructure.providers.fixture_provider import FixtureProvider
from nearme.infrastructure.providers.hosted_relational_provider import HostedRelationalProvider


logger = logging.getLogger(__name__)

PROVIDER_TYPES = ("json", "d1", "supabase", "api", "mock")


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable provider selection and transport settings."""

    type: str = "d1"
    api_base_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 10
    retry_attempts: int = 2

    def merge(self, **partial) -> "ProviderConfig":
        """
        Return a new config with the non-None values of ``partial`` applied.

        Raises:
            ConfigurationError: If ``partial`` names an unknown field
        """
        known = {f.name for f in dataclasses.fields(self)}
        unknown = set(partial) - known
        if unknown:
            raise ConfigurationError(f"Unknown provider config fields: {', '.join(sorted(unknown))}")
        updates = {key: value for key, value in partial.items() if value is not None}
        if "type" in updates:
            updates["type"] = str(updates["type"]).strip().lower()
        return dataclasses.replace(self, **updates)

    @classmethod
    def from_settings(cls, settings=Config) -> "ProviderConfig":
        """Build the default config from application settings."""
        provider_type = (settings.DATA_PROVIDER or "d1").strip().lower()
        if provider_type == "supabase":
            base_url, api_key = settings.SUPABASE_URL, settings.SUPABASE_KEY
        else:
            base_url, api_key = settings.D1_API_BASE_URL, settings.D1_API_KEY
        return cls(
            type=provider_type,
            api_base_url=base_url or None,
            api_key=api_key or None,
            timeout=settings.PROVIDER_TIMEOUT,
            retry_attempts=settings.PROVIDER_RETRY_ATTEMPTS,
        )


class ProviderFactory:
    """
    Owns the single live data provider.

    The provider is built lazily on the first ``get_provider()`` call and
    cached until ``configure()`` or ``reset()`` discards it. Instances of
    this class are injected, never shared through module state.
    """

    def __init__(self, config: Optional[ProviderConfig] = None, fixture_path: Optional[str] = None):
        """
        Initialize the factory.

        Args:
            config: Initial provider config (defaults to application settings)
            fixture_path: Fixture file for the json provider
        """
        self._config = config or ProviderConfig.from_settings()
        self._fixture_path = fixture_path if fixture_path is not None else Config.FIXTURE_PATH
        self._provider: Optional[IDataProvider] = None
        self._lock = threading.Lock()

    def configure(self, **partial) -> None:
        """
        Merge ``partial`` into the current config and discard the cached provider.

        Args:
            **partial: Any ProviderConfig fields
        """
        with self._lock:
            self._config = self._config.merge(**partial)
            discarded, self._provider = self._provider, None
        self._close(discarded)
        logger.info(f"Provider configured: type={self._config.type}")

    def get_provider(self) -> IDataProvider:
        """
        Get the live provider, building it on first use.

        Returns:
            IDataProvider instance

        Raises:
            ConfigurationError: If the configured type cannot be built
        """
        provider = self._provider
        if provider is not None:
            return provider

        with self._lock:
            if self._provider is None:
                self._provider = self.create_provider(self._config)
                logger.info(f"Data provider created: {self._config.type}")
            return self._provider

    def reset(self) -> None:
        """Discard the cached provider, keeping the config."""
        with self._lock:
            discarded, self._provider = self._provider, None
        self._close(discarded)

    def get_config(self) -> ProviderConfig:
        # Frozen dataclass, safe to hand out
        return self._config

    def is_initialized(self) -> bool:
        return self._provider is not None

    def create_provider(self, config: Optional[ProviderConfig] = None) -> IDataProvider:
        """
        Build an uncached provider for ``config``.

        Args:
            config: Provider config (defaults to the current one)

        Returns:
            IDataProvider instance

        Raises:
            ConfigurationError: For unsupported types or missing transport settings
        """
        config = config or self._config
        provider_type = config.type

        if provider_type == "json":
            return FixtureProvider(fixture_path=self._fixture_path or None)
        elif provider_type == "d1":
            self._require_transport(config)
            return EdgeQueryProvider(
                api_base_url=config.api_base_url,
                api_key=config.api_key,
                timeout=config.timeout,
                retry_attempts=config.retry_attempts,
            )
        elif provider_type == "supabase":
            self._require_transport(config)
            return HostedRelationalProvider(
                api_base_url=config.api_base_url,
                api_key=config.api_key,
                timeout=config.timeout,
                retry_attempts=config.retry_attempts,
            )
        elif provider_type in ("api", "mock"):
            raise ConfigurationError(f"Provider type '{provider_type}' is not implemented")
        else:
            raise ConfigurationError(f"Unsupported provider type: {provider_type}")

    @staticmethod
    def _close(provider: Optional[IDataProvider]) -> None:
        """Release a discarded provider's pooled connections."""
        if provider is None:
            return
        try:
            provider.close()
        except Exception as e:
            logger.warning(f"Error closing {provider.kind} provider: {e}")

    @staticmethod
    def _require_transport(config: ProviderConfig) -> None:
        missing = [name for name in ("api_base_url", "api_key") if not getattr(config, name)]
        if missing:
            raise ConfigurationError(
                f"Provider '{config.type}' requires {', '.join(missing)}"
            )
