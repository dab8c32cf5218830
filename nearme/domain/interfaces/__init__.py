"""Domain interfaces following Dependency Inversion Principle."""

from nearme.domain.interfaces.data_provider import IDataProvider, ISupportsMaintenance
from nearme.domain.interfaces.world_handler import IWorldHandler
from nearme.domain.interfaces.settings_cache import ISettingsCache

__all__ = [
    "IDataProvider",
    "ISupportsMaintenance",
    "IWorldHandler",
    "ISettingsCache",
]
