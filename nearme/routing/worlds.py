"""World handlers: thin page tables returning JSON page payloads."""
import logging
from typing import Any, Dict, List, Tuple

from nearme.domain.entities.business import BusinessRecord, normalize_slug
from nearme.domain.entities.subdomain import SubdomainInfo, slug_to_title
from nearme.domain.entities.world import WorldKind
from nearme.domain.interfaces.data_provider import IDataProvider
from nearme.domain.interfaces.world_handler import IWorldHandler
from nearme.routing.world_router import WorldRouter


logger = logging.getLogger(__name__)

Page = Tuple[Dict[str, Any], int]

STATIC_PAGES = {"about", "contact", "privacy", "terms", "add-business"}


def _segments(path: str) -> List[str]:
    return [segment for segment in (path or "/").split("/") if segment]


def _listing(records: List[BusinessRecord]) -> List[Dict[str, Any]]:
    return [record.to_dict() for record in records]


def not_found(kind: WorldKind, path: str) -> Page:
    return {"world": kind.value, "page": "not_found", "path": path}, 404


class BaseWorldHandler(IWorldHandler):
    """Shared page plumbing: static pages, business detail and 404s."""

    kind: WorldKind = WorldKind.BUSINESS

    def get_world_kind(self) -> WorldKind:
        return self.kind

    def page(self, name: str, subdomain_info: SubdomainInfo, **content) -> Page:
        return {"world": self.kind.value, "page": name, "subdomain": subdomain_info.to_dict(), **content}, 200

    def handle(self, subdomain_info: SubdomainInfo, path: str, provider: IDataProvider) -> Page:
        segments = _segments(path)

        if len(segments) == 1 and segments[0] in STATIC_PAGES:
            return self.page(segments[0], subdomain_info)

        if len(segments) == 2 and segments[0] == "business":
            record = provider.get_business_by_id(segments[1])
            if record is None:
                return not_found(self.kind, path)
            return self.page("business_detail", subdomain_info, business=record.to_dict())

        return self.route(subdomain_info, segments, path, provider)

    def route(self, subdomain_info: SubdomainInfo, segments: List[str], path: str, provider: IDataProvider) -> Page:
        return not_found(self.kind, path)


class BusinessWorld(BaseWorldHandler):
    """
    Default directory world.

    The root domain shows the directory home; ``{category}.{city}`` and
    ``{category}`` subdomains show listings.
    """

    kind = WorldKind.BUSINESS

    def route(self, subdomain_info, segments, path, provider):
        if segments:
            return not_found(self.kind, path)

        if not subdomain_info.category:
            return self.page(
                "home",
                subdomain_info,
                categories=provider.get_categories(),
                cities=provider.get_cities(),
            )

        businesses = provider.get_businesses(subdomain_info.category, subdomain_info.city)
        return self.page(
            "listing",
            subdomain_info,
            title=_title(subdomain_info.category_display, subdomain_info.city_display),
            businesses=_listing(businesses),
            count=len(businesses),
        )


class ServicesWorld(BaseWorldHandler):
    """Services hub: every category, with per-category listings one path below."""

    kind = WorldKind.SERVICES

    def route(self, subdomain_info, segments, path, provider):
        if not segments:
            return self.page(
                "services_home",
                subdomain_info,
                categories=[
                    {"slug": slug, "name": slug_to_title(slug)} for slug in provider.get_categories()
                ],
                cities=provider.get_cities(),
            )

        if len(segments) <= 2:
            category = normalize_slug(segments[0])
            city = normalize_slug(segments[1]) if len(segments) == 2 else subdomain_info.city
            businesses = provider.get_businesses(category, city)
            return self.page(
                "listing",
                subdomain_info,
                title=_title(slug_to_title(category), slug_to_title(city)),
                businesses=_listing(businesses),
                count=len(businesses),
            )

        return not_found(self.kind, path)


class PathBasedWorld(BaseWorldHandler):
    """
    Single-purpose world whose city comes from the host or the first path segment.

    ``water-refill.near-me.us/`` lists every city, ``/dallas`` lists one.
    """

    category: str = ""

    def route(self, subdomain_info, segments, path, provider):
        if len(segments) > 1:
            return not_found(self.kind, path)

        city = subdomain_info.city
        if segments:
            city = normalize_slug(segments[0])

        businesses = provider.get_businesses(self.category, city)
        if city:
            return self.page(
                "city_listing",
                subdomain_info,
                city=city,
                title=_title(slug_to_title(self.category), slug_to_title(city)),
                businesses=_listing(businesses),
                count=len(businesses),
            )

        return self.page(
            "world_home",
            subdomain_info,
            title=slug_to_title(self.category),
            cities=sorted({record.city for record in businesses if record.city}),
            businesses=_listing(businesses),
            count=len(businesses),
        )


class WaterRefillWorld(PathBasedWorld):
    kind = WorldKind.WATER_REFILL
    category = "water-refill"


class SeniorCareWorld(PathBasedWorld):
    kind = WorldKind.SENIOR_CARE
    category = "senior-care"


class SpecialtyPetWorld(PathBasedWorld):
    kind = WorldKind.SPECIALTY_PET
    category = "specialty-pet"


def _title(category_display: str, city_display: str) -> str:
    if category_display and city_display:
        return f"{category_display} in {city_display}"
    return category_display or city_display


def create_world_router() -> WorldRouter:
    """Build a router with every world registered."""
    router = WorldRouter()
    for handler in (
        WaterRefillWorld(),
        SeniorCareWorld(),
        SpecialtyPetWorld(),
        ServicesWorld(),
        BusinessWorld(),
    ):
        router.register_world(handler.get_world_kind(), handler)
    logger.info("All worlds registered")
    return router
