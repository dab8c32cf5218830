"""Tests for world selection, dispatch and the world page handlers."""
from unittest.mock import MagicMock

import pytest

from nearme.domain.entities.subdomain import SubdomainInfo
from nearme.domain.entities.world import WorldKind
from nearme.domain.interfaces.world_handler import IWorldHandler
from nearme.routing.world_router import WorldRouter
from nearme.routing.worlds import create_world_router
from nearme.utils.hostname_parser import HostnameParser


class RecordingWorld(IWorldHandler):
    def __init__(self, kind: WorldKind):
        self.kind = kind
        self.calls = []

    def get_world_kind(self) -> WorldKind:
        return self.kind

    def handle(self, subdomain_info, path, provider):
        self.calls.append((subdomain_info, path, provider))
        return {"world": self.kind.value}, 200


@pytest.mark.parametrize(
    "info, expected",
    [
        (SubdomainInfo(is_water_refill=True), WorldKind.WATER_REFILL),
        (SubdomainInfo(is_senior_care=True), WorldKind.SENIOR_CARE),
        (SubdomainInfo(is_specialty_pet=True), WorldKind.SPECIALTY_PET),
        (SubdomainInfo(is_services=True), WorldKind.SERVICES),
        (SubdomainInfo(category="nail-salons", city="chicago"), WorldKind.BUSINESS),
        (SubdomainInfo(), WorldKind.BUSINESS),
    ],
)
def test_select_world(info: SubdomainInfo, expected: WorldKind) -> None:
    assert WorldRouter.select_world(info) == expected


def test_overlapping_flags_resolve_by_priority() -> None:
    info = SubdomainInfo(is_services=True, is_specialty_pet=True, is_water_refill=True)

    assert WorldRouter.select_world(info) == WorldKind.WATER_REFILL


def test_root_domain_selects_business_world() -> None:
    info = HostnameParser.parse("near-me.us", "/", "near-me.us")

    assert WorldRouter.select_world(info) == WorldKind.BUSINESS


def test_dispatch_passes_subdomain_info_unchanged() -> None:
    router = WorldRouter()
    world = RecordingWorld(WorldKind.WATER_REFILL)
    router.register_world(WorldKind.WATER_REFILL, world)
    info = SubdomainInfo(category="water-refill", city="dallas", state="Texas", is_water_refill=True, is_path_based=True)
    provider = MagicMock()

    payload, status = router.dispatch(info, "/dallas", provider)

    assert (payload, status) == ({"world": "water_refill"}, 200)
    assert world.calls == [(info, "/dallas", provider)]
    assert world.calls[0][0] is info


def test_dispatch_without_handler_raises() -> None:
    with pytest.raises(LookupError):
        WorldRouter().dispatch(SubdomainInfo(), "/", MagicMock())


def test_register_world_rejects_non_handlers() -> None:
    with pytest.raises(ValueError):
        WorldRouter().register_world(WorldKind.BUSINESS, object())


def test_default_router_registers_every_world() -> None:
    assert set(create_world_router().get_all_handlers()) == set(WorldKind)


def test_business_listing_page(fixture_provider) -> None:
    info = SubdomainInfo(category="nail-salons", city="chicago", state="Illinois")

    payload, status = create_world_router().dispatch(info, "/", fixture_provider)

    assert status == 200
    assert payload["page"] == "listing"
    assert payload["title"] == "Nail Salons in Chicago"
    assert payload["businesses"][0]["id"] == "nail-salons-chicago-01"


def test_business_home_page(fixture_provider) -> None:
    payload, status = create_world_router().dispatch(SubdomainInfo(), "/", fixture_provider)

    assert status == 200
    assert payload["page"] == "home"
    assert "nail-salons" in payload["categories"]


def test_water_refill_city_page(fixture_provider) -> None:
    info = HostnameParser.parse("water-refill.near-me.us", "/dallas", "near-me.us")

    payload, status = create_world_router().dispatch(info, "/dallas", fixture_provider)

    assert status == 200
    assert payload["world"] == "water_refill"
    assert payload["page"] == "city_listing"
    assert [b["id"] for b in payload["businesses"]] == ["water-refill-dallas-01"]


def test_water_refill_home_lists_cities(fixture_provider) -> None:
    info = HostnameParser.parse("water-refill.near-me.us", "/", "near-me.us")

    payload, _ = create_world_router().dispatch(info, "/", fixture_provider)

    assert payload["cities"] == ["dallas", "san-francisco"]


def test_services_category_page(fixture_provider) -> None:
    info = SubdomainInfo(is_services=True)

    payload, status = create_world_router().dispatch(info, "/auto-repair/denver", fixture_provider)

    assert status == 200
    assert [b["id"] for b in payload["businesses"]] == ["auto-repair-denver-01", "auto-repair-denver-02"]


def test_business_detail_and_unknown_paths(fixture_provider) -> None:
    router = create_world_router()

    payload, status = router.dispatch(SubdomainInfo(), "/business/auto-repair-denver-01", fixture_provider)
    assert status == 200
    assert payload["business"]["name"] == "Mile High Auto Care"

    _, status = router.dispatch(SubdomainInfo(), "/business/nope", fixture_provider)
    assert status == 404

    _, status = router.dispatch(SubdomainInfo(is_senior_care=True), "/a/b/c", fixture_provider)
    assert status == 404
