"""Interface for the admin settings cache (Repository Pattern)."""
from abc import ABC, abstractmethod
from typing import Any, Optional


class ISettingsCache(ABC):
    """Interface for caching admin settings read from the database."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Retrieve a cached setting.

        Args:
            key: Setting key

        Returns:
            Cached value or None if not cached
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Cache a setting value.

        Args:
            key: Setting key
            value: JSON-serializable value
            ttl: Optional time to live in seconds
        """
        pass
