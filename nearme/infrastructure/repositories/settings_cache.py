"""Redis-based admin settings cache."""
import json
import logging
from typing import Any, Optional

import redis

from nearme.config.settings import Config
from nearme.domain.interfaces.settings_cache import ISettingsCache
from nearme.infrastructure.redis_client import RedisClientFactory


class RedisSettingsCache(ISettingsCache):
    """
    Redis-based settings cache.

    Values are stored JSON-encoded under ``settings:{key}`` with a TTL.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None, ttl: Optional[int] = None):
        """
        Initialize the cache.

        Args:
            redis_client: Redis client instance (Dependency Injection)
            ttl: Default time to live in seconds
        """
        self.redis = redis_client if redis_client is not None else RedisClientFactory.get_client()
        self.default_ttl = ttl or Config.SETTINGS_CACHE_TTL
        self._logger = logging.getLogger(__name__)
        self._key_prefix = "settings:"

    def _get_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        """
        Retrieve a cached setting.

        Raises:
            redis.RedisError: If Redis fails mid-request
        """
        if not self.redis:
            return None

        data = self.redis.get(self._get_key(key))
        if data is None:
            return None
        return json.loads(data)

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if not self.redis:
            self._logger.debug("Redis not available - setting not cached")
            return

        self.redis.setex(self._get_key(key), ttl or self.default_ttl, json.dumps(value))
        self._logger.debug(f"Setting {key} cached with TTL {ttl or self.default_ttl}s")
