"""Subdomain routing intent value object."""
from dataclasses import dataclass, asdict
from typing import Any, Dict


def slug_to_title(slug: str) -> str:
    """Convert a kebab-case slug to Title Case for display."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-") if word)


@dataclass(frozen=True)
class SubdomainInfo:
    """
    Routing intent for one incoming request.

    Built once per request by the hostname parser and handed, unchanged,
    to the world router and every page. At most one intent flag is set;
    none set means the default business-directory world.
    """

    category: str = ""
    city: str = ""
    state: str = ""
    is_water_refill: bool = False
    is_senior_care: bool = False
    is_specialty_pet: bool = False
    is_services: bool = False
    is_path_based: bool = False

    @property
    def category_display(self) -> str:
        return slug_to_title(self.category)

    @property
    def city_display(self) -> str:
        return slug_to_title(self.city)

    @property
    def site_id(self) -> str:
        """Subdomain slug in ``category.city`` form, as stored on submissions."""
        if self.category and self.city:
            return f"{self.category}.{self.city}"
        return self.category

    @property
    def intent_flags(self) -> Dict[str, bool]:
        return {
            "is_water_refill": self.is_water_refill,
            "is_senior_care": self.is_senior_care,
            "is_specialty_pet": self.is_specialty_pet,
            "is_services": self.is_services,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["category_display"] = self.category_display
        data["city_display"] = self.city_display
        data["site_id"] = self.site_id
        return data
