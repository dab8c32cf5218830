"""Static subdomain tables: special worlds, blocked labels and city/state mappings."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class SpecialService:
    """A single-purpose subdomain that bypasses category/city decomposition."""

    label: str
    flag: str
    display_name: str
    path_based: bool = False


@dataclass(frozen=True)
class CityStateMapping:
    """City slug with its state and alternative spellings."""

    city: str
    state: str
    aliases: Tuple[str, ...] = field(default_factory=tuple)


# Order matters: it is the priority used when several labels could match.
SPECIAL_SERVICES: List[SpecialService] = [
    SpecialService("water-refill", "is_water_refill", "Water Refill Stations", path_based=True),
    SpecialService("senior-care", "is_senior_care", "Senior Care Services", path_based=True),
    SpecialService("specialty-pet", "is_specialty_pet", "Specialty Pet Care", path_based=True),
    SpecialService("services", "is_services", "All Services"),
]

BLOCKED_LABELS: Tuple[str, ...] = (
    "www",
    "admin",
    "api",
    "mail",
    "ftp",
    "test",
    "dev",
    "staging",
)

LOCAL_HOSTS: Tuple[str, ...] = ("localhost", "127.0.0.1", "0.0.0.0")

CITY_STATE_MAPPINGS: List[CityStateMapping] = [
    # Texas
    CityStateMapping("dallas", "Texas"),
    CityStateMapping("garland", "Texas"),
    CityStateMapping("austin", "Texas"),
    CityStateMapping("houston", "Texas"),
    CityStateMapping("frisco", "Texas"),
    CityStateMapping("san-antonio", "Texas", ("sanantonio",)),
    CityStateMapping("fort-worth", "Texas", ("fortworth",)),
    CityStateMapping("el-paso", "Texas", ("elpaso",)),
    CityStateMapping("arlington", "Texas"),
    CityStateMapping("corpus-christi", "Texas", ("corpuschristi",)),
    # California
    CityStateMapping("san-francisco", "California", ("sanfrancisco", "sf")),
    CityStateMapping("los-angeles", "California", ("losangeles", "la")),
    CityStateMapping("san-diego", "California", ("sandiego",)),
    CityStateMapping("san-jose", "California", ("sanjose",)),
    CityStateMapping("fresno", "California"),
    CityStateMapping("sacramento", "California"),
    CityStateMapping("long-beach", "California", ("longbeach",)),
    CityStateMapping("oakland", "California"),
    CityStateMapping("bakersfield", "California"),
    CityStateMapping("anaheim", "California"),
    # New York
    CityStateMapping("new-york", "New York", ("newyork", "nyc")),
    CityStateMapping("buffalo", "New York"),
    CityStateMapping("rochester", "New York"),
    CityStateMapping("yonkers", "New York"),
    CityStateMapping("syracuse", "New York"),
    CityStateMapping("albany", "New York"),
    # Florida
    CityStateMapping("miami", "Florida"),
    CityStateMapping("tampa", "Florida"),
    CityStateMapping("orlando", "Florida"),
    CityStateMapping("jacksonville", "Florida"),
    CityStateMapping("st-petersburg", "Florida", ("stpetersburg",)),
    CityStateMapping("hialeah", "Florida"),
    CityStateMapping("tallahassee", "Florida"),
    CityStateMapping("fort-lauderdale", "Florida", ("fortlauderdale",)),
    # Illinois
    CityStateMapping("chicago", "Illinois"),
    CityStateMapping("aurora", "Illinois"),
    CityStateMapping("rockford", "Illinois"),
    CityStateMapping("joliet", "Illinois"),
    CityStateMapping("naperville", "Illinois"),
    CityStateMapping("springfield", "Illinois"),
    CityStateMapping("peoria", "Illinois"),
    CityStateMapping("elgin", "Illinois"),
    # Pennsylvania
    CityStateMapping("philadelphia", "Pennsylvania"),
    CityStateMapping("pittsburgh", "Pennsylvania"),
    CityStateMapping("allentown", "Pennsylvania"),
    CityStateMapping("erie", "Pennsylvania"),
    CityStateMapping("reading", "Pennsylvania"),
    CityStateMapping("scranton", "Pennsylvania"),
    # Ohio
    CityStateMapping("columbus", "Ohio"),
    CityStateMapping("cleveland", "Ohio"),
    CityStateMapping("cincinnati", "Ohio"),
    CityStateMapping("toledo", "Ohio"),
    CityStateMapping("akron", "Ohio"),
    CityStateMapping("dayton", "Ohio"),
    # Georgia
    CityStateMapping("atlanta", "Georgia"),
    CityStateMapping("augusta", "Georgia"),
    CityStateMapping("macon", "Georgia"),
    CityStateMapping("savannah", "Georgia"),
    CityStateMapping("athens", "Georgia"),
    # North Carolina
    CityStateMapping("charlotte", "North Carolina"),
    CityStateMapping("raleigh", "North Carolina"),
    CityStateMapping("greensboro", "North Carolina"),
    CityStateMapping("durham", "North Carolina"),
    CityStateMapping("winston-salem", "North Carolina", ("winstonsalem",)),
    CityStateMapping("fayetteville", "North Carolina"),
    # Michigan
    CityStateMapping("detroit", "Michigan"),
    CityStateMapping("grand-rapids", "Michigan", ("grandrapids",)),
    CityStateMapping("warren", "Michigan"),
    CityStateMapping("sterling-heights", "Michigan", ("sterlingheights",)),
    CityStateMapping("lansing", "Michigan"),
    CityStateMapping("ann-arbor", "Michigan", ("annarbor",)),
    # Other major cities
    CityStateMapping("denver", "Colorado"),
    CityStateMapping("colorado-springs", "Colorado", ("coloradosprings",)),
    CityStateMapping("phoenix", "Arizona"),
    CityStateMapping("tucson", "Arizona"),
    CityStateMapping("mesa", "Arizona"),
    CityStateMapping("seattle", "Washington"),
    CityStateMapping("portland", "Oregon"),
    CityStateMapping("boston", "Massachusetts"),
    CityStateMapping("las-vegas", "Nevada", ("lasvegas",)),
    CityStateMapping("baltimore", "Maryland"),
    CityStateMapping("milwaukee", "Wisconsin"),
    CityStateMapping("kansas-city", "Missouri", ("kansascity",)),
    CityStateMapping("nashville", "Tennessee"),
    CityStateMapping("memphis", "Tennessee"),
    CityStateMapping("louisville", "Kentucky"),
    CityStateMapping("oklahoma-city", "Oklahoma", ("oklahomacity",)),
    CityStateMapping("tulsa", "Oklahoma"),
    CityStateMapping("virginia-beach", "Virginia", ("virginiabeach",)),
    CityStateMapping("omaha", "Nebraska"),
    CityStateMapping("minneapolis", "Minnesota"),
    CityStateMapping("wichita", "Kansas"),
    CityStateMapping("new-orleans", "Louisiana", ("neworleans",)),
]


def _build_city_lookup(mappings: List[CityStateMapping]) -> Dict[str, Tuple[str, str]]:
    """Map every city slug and alias to (canonical slug, state)."""
    lookup: Dict[str, Tuple[str, str]] = {}
    for mapping in mappings:
        lookup.setdefault(mapping.city, (mapping.city, mapping.state))
        for alias in mapping.aliases:
            lookup.setdefault(alias, (mapping.city, mapping.state))
    return lookup


_CITY_LOOKUP = _build_city_lookup(CITY_STATE_MAPPINGS)


def resolve_city(city: str) -> Tuple[str, str]:
    """
    Resolve a city slug or alias.

    Args:
        city: City slug as it appeared in the hostname or path

    Returns:
        Tuple of (canonical city slug, state name); state is "" for unknown cities
    """
    normalized = (city or "").strip().lower()
    if normalized in _CITY_LOOKUP:
        return _CITY_LOOKUP[normalized]
    return normalized, ""


def get_special_service(label: str) -> Optional[SpecialService]:
    """Return the special service registered for a subdomain label, if any."""
    for service in SPECIAL_SERVICES:
        if service.label == label:
            return service
    return None
