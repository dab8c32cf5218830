"""Tests for LayeredSettingsResolver precedence and fall-through."""
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

from nearme.config.layered_settings import LayeredSettingsResolver
from nearme.domain.exceptions import BackendUnavailable
from nearme.domain.interfaces.settings_cache import ISettingsCache


class MemoryCache(ISettingsCache):
    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self.values = dict(values or {})

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value, ttl=None):
        self.values[key] = value


def _provider(value=None, error=None) -> MagicMock:
    provider = MagicMock()
    if error is not None:
        provider.get_setting.side_effect = error
    else:
        provider.get_setting.return_value = value
    return provider


def test_database_beats_cache_and_environment() -> None:
    cache = MemoryCache({"enable_ads": False})
    resolver = LayeredSettingsResolver(
        lambda: _provider(True), cache=cache, environ={"SETTINGS_ENABLE_ADS": "false"}
    )

    resolution = resolver.resolve("enable_ads")

    assert resolution.value is True
    assert resolution.source == "database"
    assert cache.values["enable_ads"] is True


def test_cache_beats_environment() -> None:
    resolver = LayeredSettingsResolver(
        lambda: _provider(None),
        cache=MemoryCache({"enable_ads": True}),
        environ={"SETTINGS_ENABLE_ADS": "false"},
    )

    resolution = resolver.resolve("enable_ads")

    assert (resolution.value, resolution.source) == (True, "cache")


def test_failing_database_falls_through() -> None:
    resolver = LayeredSettingsResolver(
        lambda: _provider(error=BackendUnavailable("down", backend="d1")),
        cache=MemoryCache(),
        environ={"SETTINGS_ENABLE_TRACKING": "false"},
    )

    resolution = resolver.resolve("enable_tracking")

    assert (resolution.value, resolution.source) == (False, "environment")


def test_failing_cache_falls_through() -> None:
    cache = MagicMock(spec=ISettingsCache)
    cache.get.side_effect = ConnectionError("redis gone")
    resolver = LayeredSettingsResolver(lambda: _provider(None), cache=cache, environ={"SETTINGS_MAX_ADS": "3"})

    resolution = resolver.resolve("max_ads")

    assert (resolution.value, resolution.source) == (3, "environment")


def test_default_when_no_layer_has_key() -> None:
    resolver = LayeredSettingsResolver(lambda: _provider(None), environ={})

    resolution = resolver.resolve("enable_ads", default=False)

    assert (resolution.value, resolution.source) == (False, "default")
    assert resolver.is_enabled("enable_ads") is False


def test_env_var_name_and_plain_strings() -> None:
    resolver = LayeredSettingsResolver(lambda: _provider(None), environ={"SETTINGS_AD_NETWORK": "house"})

    assert resolver.env_var_name("ad-network") == "SETTINGS_AD_NETWORK"
    assert resolver.get("ad-network") == "house"
