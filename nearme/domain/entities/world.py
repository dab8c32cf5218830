"""Presentation world identifiers."""
from enum import Enum


class WorldKind(str, Enum):
    """The mutually exclusive presentation worlds a request can land in."""

    WATER_REFILL = "water_refill"
    SENIOR_CARE = "senior_care"
    SPECIALTY_PET = "specialty_pet"
    SERVICES = "services"
    BUSINESS = "business"
