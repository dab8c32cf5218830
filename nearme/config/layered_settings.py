"""Feature flag resolution across database, cache and environment layers."""
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from nearme.domain.interfaces.data_provider import IDataProvider
from nearme.domain.interfaces.settings_cache import ISettingsCache


logger = logging.getLogger(__name__)

SOURCE_DATABASE = "database"
SOURCE_CACHE = "cache"
SOURCE_ENVIRONMENT = "environment"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class SettingResolution:
    """A resolved setting tagged with the layer that supplied it."""

    key: str
    value: Any
    source: str

    def to_dict(self):
        return {"key": self.key, "value": self.value, "source": self.source}


def _parse_env_value(raw: str) -> Any:
    lowered = raw.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return json.loads(raw)
    except ValueError:
        return raw


class LayeredSettingsResolver:
    """
    Resolves admin settings with fixed precedence.

    The provider's ``admin_settings`` table wins, then the Redis cache, then
    ``SETTINGS_<KEY>`` environment variables. Database hits refresh the
    cache so the next request survives a database outage. A layer that
    raises is logged and skipped.
    """

    def __init__(
        self,
        provider_source: Callable[[], IDataProvider],
        cache: Optional[ISettingsCache] = None,
        environ: Optional[Mapping[str, str]] = None,
        env_prefix: str = "SETTINGS_",
    ):
        """
        Initialize the resolver.

        Args:
            provider_source: Callable returning the live data provider
            cache: Optional settings cache
            environ: Environment mapping (defaults to os.environ)
            env_prefix: Prefix for environment variable names
        """
        self._provider_source = provider_source
        self._cache = cache
        self._environ = environ if environ is not None else os.environ
        self._env_prefix = env_prefix

    def resolve(self, key: str, default: Any = None) -> SettingResolution:
        """
        Resolve a setting.

        Args:
            key: Setting key, e.g. "enable_tracking"
            default: Value returned when no layer has the key

        Returns:
            SettingResolution naming the supplying layer
        """
        value = self._from_database(key)
        if value is not None:
            self._store_in_cache(key, value)
            return SettingResolution(key, value, SOURCE_DATABASE)

        value = self._from_cache(key)
        if value is not None:
            return SettingResolution(key, value, SOURCE_CACHE)

        raw = self._environ.get(self.env_var_name(key))
        if raw is not None:
            return SettingResolution(key, _parse_env_value(raw), SOURCE_ENVIRONMENT)

        return SettingResolution(key, default, SOURCE_DEFAULT)

    def get(self, key: str, default: Any = None) -> Any:
        return self.resolve(key, default).value

    def is_enabled(self, key: str, default: bool = False) -> bool:
        return bool(self.get(key, default))

    def env_var_name(self, key: str) -> str:
        return f"{self._env_prefix}{key.upper().replace('-', '_')}"

    def _from_database(self, key: str) -> Optional[Any]:
        try:
            return self._provider_source().get_setting(key)
        except Exception as e:
            logger.warning(f"Settings database layer failed for '{key}', falling through: {e}")
            return None

    def _from_cache(self, key: str) -> Optional[Any]:
        if self._cache is None:
            return None
        try:
            return self._cache.get(key)
        except Exception as e:
            logger.warning(f"Settings cache layer failed for '{key}', falling through: {e}")
            return None

    def _store_in_cache(self, key: str, value: Any) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(key, value)
        except Exception as e:
            logger.debug(f"Could not cache setting '{key}': {e}")
