"""World selection and world page handlers."""
from nearme.routing.world_router import WorldRouter
from nearme.routing.worlds import create_world_router

__all__ = ["WorldRouter", "create_world_router"]
