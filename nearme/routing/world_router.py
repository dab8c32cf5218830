"""World router implementation (Registry Pattern).

Picks one presentation world for a request from its subdomain intent and
hands the request to that world's handler.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from nearme.domain.entities.subdomain import SubdomainInfo
from nearme.domain.entities.world import WorldKind
from nearme.domain.interfaces.data_provider import IDataProvider
from nearme.domain.interfaces.world_handler import IWorldHandler
from nearme.middleware.monitoring import track_world_selection


logger = logging.getLogger(__name__)

# Evaluated in order; first match wins, so overlapping flags resolve deterministically
WORLD_PREDICATES: List[Tuple[WorldKind, Callable[[SubdomainInfo], bool]]] = [
    (WorldKind.WATER_REFILL, lambda info: info.is_water_refill),
    (WorldKind.SENIOR_CARE, lambda info: info.is_senior_care),
    (WorldKind.SPECIALTY_PET, lambda info: info.is_specialty_pet),
    (WorldKind.SERVICES, lambda info: info.is_services),
]


class WorldRouter:
    """
    Registry of world handlers keyed by ``WorldKind``.

    Selection is a pure function of the ``SubdomainInfo``; the default
    business-directory world catches everything the predicates do not.
    """

    def __init__(self):
        """Initialize router with empty registry."""
        self._handlers: Dict[WorldKind, IWorldHandler] = {}
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def select_world(subdomain_info: SubdomainInfo) -> WorldKind:
        """
        Choose the world for a request.

        Args:
            subdomain_info: Parsed routing intent

        Returns:
            The first WorldKind whose predicate matches, else BUSINESS
        """
        for kind, predicate in WORLD_PREDICATES:
            if predicate(subdomain_info):
                return kind
        return WorldKind.BUSINESS

    def register_world(self, kind: WorldKind, handler: IWorldHandler) -> None:
        """
        Register the handler serving a world.

        Args:
            kind: World the handler serves
            handler: World handler instance

        Raises:
            ValueError: If handler is invalid
        """
        if not isinstance(handler, IWorldHandler):
            raise ValueError("Handler must implement IWorldHandler")

        if kind in self._handlers:
            self._logger.warning(f"Handler for world '{kind.value}' already exists. Overwriting")

        self._handlers[kind] = handler
        self._logger.info(f"Registered handler for world '{kind.value}'")

    def get_handler(self, kind: WorldKind) -> Optional[IWorldHandler]:
        return self._handlers.get(kind)

    def get_all_handlers(self) -> Dict[WorldKind, IWorldHandler]:
        return self._handlers.copy()

    def dispatch(self, subdomain_info: SubdomainInfo, path: str, provider: IDataProvider) -> Tuple[Dict[str, Any], int]:
        """
        Select a world and let its handler render the request.

        Args:
            subdomain_info: Parsed routing intent, passed through unmodified
            path: Request path
            provider: Data provider for page reads

        Returns:
            Tuple of (payload dictionary, HTTP status code)

        Raises:
            LookupError: If no handler is registered for the selected world
        """
        kind = self.select_world(subdomain_info)
        handler = self._handlers.get(kind)
        if handler is None:
            raise LookupError(f"No handler registered for world '{kind.value}'")

        track_world_selection(kind.value)
        self._logger.debug(f"Dispatching {path} to world '{kind.value}'")
        return handler.handle(subdomain_info, path, provider)
