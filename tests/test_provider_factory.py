"""Tests for ProviderConfig and ProviderFactory lifecycle."""
import threading
from unittest.mock import patch

import pytest

from nearme.domain.exceptions import ConfigurationError
from nearme.infrastructure.factories.provider_factory import ProviderConfig, ProviderFactory
from nearme.infrastructure.providers.edge_query_provider import EdgeQueryProvider
from nearme.infrastructure.providers.fixture_provider import FixtureProvider
from nearme.infrastructure.providers.hosted_relational_provider import HostedRelationalProvider


@pytest.fixture
def factory() -> ProviderFactory:
    return ProviderFactory(ProviderConfig(type="json"))


def test_get_provider_builds_once(factory: ProviderFactory) -> None:
    assert not factory.is_initialized()

    first = factory.get_provider()

    assert isinstance(first, FixtureProvider)
    assert factory.get_provider() is first
    assert factory.is_initialized()


def test_configure_discards_instance(factory: ProviderFactory) -> None:
    first = factory.get_provider()

    factory.configure(timeout=5)

    assert not factory.is_initialized()
    assert factory.get_config().timeout == 5
    assert factory.get_provider() is not first


def test_reset_keeps_config(factory: ProviderFactory) -> None:
    factory.configure(retry_attempts=0)
    first = factory.get_provider()

    factory.reset()

    assert factory.get_config().retry_attempts == 0
    assert factory.get_provider() is not first


@pytest.mark.parametrize("provider_type", ["api", "mock", "oracle"])
def test_unsupported_types_fail_fast(factory: ProviderFactory, provider_type: str) -> None:
    factory.configure(type=provider_type)

    with pytest.raises(ConfigurationError):
        factory.get_provider()
    assert not factory.is_initialized()


def test_remote_provider_requires_credentials(factory: ProviderFactory) -> None:
    factory.configure(type="d1")

    with pytest.raises(ConfigurationError, match="api_base_url"):
        factory.get_provider()


def test_d1_and_supabase_construction(factory: ProviderFactory) -> None:
    factory.configure(type="D1", api_base_url="https://edge.example.test", api_key="k")
    assert isinstance(factory.get_provider(), EdgeQueryProvider)

    factory.configure(type="supabase")
    assert isinstance(factory.get_provider(), HostedRelationalProvider)


def test_create_provider_is_uncached(factory: ProviderFactory) -> None:
    cached = factory.get_provider()

    assert factory.create_provider() is not cached
    assert factory.get_provider() is cached


def test_merge_ignores_none_and_rejects_unknown_fields() -> None:
    config = ProviderConfig(type="d1", api_key="k")

    merged = config.merge(api_key=None, timeout=2.5)

    assert merged.api_key == "k"
    assert merged.timeout == 2.5
    assert config.timeout == 10
    with pytest.raises(ConfigurationError):
        config.merge(region="eu")


def test_from_settings_picks_backend_credentials() -> None:
    class Settings:
        DATA_PROVIDER = "supabase"
        SUPABASE_URL = "https://project.example.test"
        SUPABASE_KEY = "anon"
        D1_API_BASE_URL = "https://edge.example.test"
        D1_API_KEY = "edge"
        PROVIDER_TIMEOUT = 4.0
        PROVIDER_RETRY_ATTEMPTS = 1

    config = ProviderConfig.from_settings(Settings)

    assert config == ProviderConfig(
        type="supabase",
        api_base_url="https://project.example.test",
        api_key="anon",
        timeout=4.0,
        retry_attempts=1,
    )


def test_concurrent_first_calls_share_one_instance(factory: ProviderFactory) -> None:
    results = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        results.append(factory.get_provider())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({id(provider) for provider in results}) == 1


def test_factories_are_independent() -> None:
    first = ProviderFactory(ProviderConfig(type="json"))
    second = ProviderFactory(ProviderConfig(type="json"))

    assert first.get_provider() is not second.get_provider()


def test_configure_closes_discarded_http_provider() -> None:
    factory = ProviderFactory(ProviderConfig(type="d1", api_base_url="https://edge.example.test", api_key="k"))
    provider = factory.get_provider()

    with patch.object(provider.client.session, "close") as mock_close:
        factory.configure(timeout=3)

    mock_close.assert_called_once()


def test_reset_closes_discarded_provider() -> None:
    factory = ProviderFactory(ProviderConfig(type="supabase", api_base_url="https://project.example.test", api_key="k"))
    provider = factory.get_provider()

    with patch.object(provider, "close") as mock_close:
        factory.reset()

    mock_close.assert_called_once()


def test_close_failure_does_not_block_reset(factory: ProviderFactory) -> None:
    provider = factory.get_provider()

    with patch.object(provider, "close", side_effect=RuntimeError("already closed")):
        factory.reset()

    assert not factory.is_initialized()
