"""Repository implementations."""
from nearme.infrastructure.repositories.settings_cache import RedisSettingsCache

__all__ = ["RedisSettingsCache"]
