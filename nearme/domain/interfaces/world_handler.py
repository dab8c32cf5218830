"""Interface for presentation world handlers.

Each world owns its own page table; the router only hands it the request
context once the world has been chosen.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from nearme.domain.entities.subdomain import SubdomainInfo
from nearme.domain.entities.world import WorldKind
from nearme.domain.interfaces.data_provider import IDataProvider


class IWorldHandler(ABC):
    """Interface for world-specific page routers."""

    @abstractmethod
    def get_world_kind(self) -> WorldKind:
        """
        Get the world this handler serves.

        Returns:
            WorldKind value
        """
        pass

    @abstractmethod
    def handle(self, subdomain_info: SubdomainInfo, path: str, provider: IDataProvider) -> Tuple[Dict[str, Any], int]:
        """
        Render a page payload for a path inside this world.

        Args:
            subdomain_info: Full, unmodified routing intent for the request
            path: Request path
            provider: Data provider for page reads

        Returns:
            Tuple of (payload dictionary, HTTP status code)
        """
        pass
