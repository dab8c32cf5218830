"""Business directory domain entities."""
import json
import logging
import re
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple


logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_slug(value: Optional[str]) -> str:
    """
    Normalize a category or city to its lowercase kebab-case slug.

    "Nail Salons" and "nail-salons" both become "nail-salons".
    """
    if not value:
        return ""
    return _WHITESPACE.sub("-", str(value).strip().lower())


def slug_pattern(slug: str, wildcard: str) -> str:
    """
    Loose match pattern for a slug: every separator becomes ``wildcard``.

    "nail-salons" with "%" gives "%nail%salons%", which a LIKE/ilike filter
    matches against "Nail Salons", " nail-salons" and "nail  salons". The
    pattern also admits near misses, so callers confirm the exact slug with
    ``normalize_slug`` afterwards.
    """
    return wildcard + wildcard.join(part for part in slug.split("-") if part) + wildcard


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "t", "yes")
    return bool(value)


def _as_float(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _as_int(value: Any) -> int:
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


def _text(value: Any, field_name: str) -> str:
    """Required request text field; numbers are accepted and stringified."""
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValueError(f"{field_name} must be a string")
    return str(value).strip()


def _optional_text(value: Any, field_name: str) -> Optional[str]:
    if value is None or value == "":
        return None
    return _text(value, field_name)


def _parse_services(value: Any) -> List[str]:
    """
    Accept services as a list, a JSON-encoded list, or a comma-separated string.

    Raises:
        ValueError: For any other shape
    """
    if value is None or value == "":
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                value = json.loads(stripped)
            except ValueError as e:
                raise ValueError("services is not a valid JSON list") from e
        else:
            return [item.strip() for item in stripped.split(",") if item.strip()]
    if not isinstance(value, list):
        raise ValueError("services must be a list of strings")
    return [_text(item, "services entry") for item in value if item not in (None, "")]


def _parse_hours(value: Any) -> Dict[str, str]:
    """Accept hours as an object or a JSON-encoded object."""
    if value is None or value == "":
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as e:
            raise ValueError("hours is not a valid JSON object") from e
    if not isinstance(value, dict):
        raise ValueError("hours must be an object mapping days to opening hours")
    return {str(day): _text(hours, f"hours[{day}]") for day, hours in value.items()}


def _decode_json(value: Any, default: Any) -> Any:
    """Decode a JSON-encoded column; backends may already return decoded values."""
    if value is None or value == "":
        return default
    if isinstance(value, (list, dict)):
        return value
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed JSON column value: {str(value)[:80]}")
        return default
    return decoded if isinstance(decoded, type(default)) else default


@dataclass
class BusinessRecord:
    """Domain entity representing one directory listing, independent of backend."""

    id: str
    name: str
    category: str = ""
    city: str = ""
    state: str = ""
    business_id: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    services: List[str] = field(default_factory=list)
    hours: Dict[str, str] = field(default_factory=dict)
    rating: float = 0.0
    review_count: int = 0
    verified: bool = False
    premium: bool = False
    status: str = "active"
    image: Optional[str] = None
    logo_url: Optional[str] = None
    established: Optional[int] = None
    site_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        """Validate business entity."""
        if self.id is None:
            raise ValueError("id is required")
        if self.name is None:
            raise ValueError("name is required")

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "BusinessRecord":
        """
        Build a record from a backend row.

        Handles SQL rows (JSON-encoded ``services``/``hours``, 0/1 booleans),
        PostgREST rows (already-decoded JSON) and fixture rows (camelCase keys).

        Args:
            row: Raw row dictionary

        Returns:
            BusinessRecord instance
        """
        def pick(*keys: str) -> Any:
            for key in keys:
                if row.get(key) is not None:
                    return row[key]
            return None

        record_id = pick("id", "business_id")
        return cls(
            id=str(record_id) if record_id is not None else "",
            name=pick("name", "business_name") or "",
            category=normalize_slug(pick("category")),
            city=normalize_slug(pick("city")),
            state=pick("state") or "",
            business_id=pick("business_id", "businessId"),
            address=pick("address"),
            zip_code=pick("zip_code", "zipCode", "zip"),
            phone=pick("phone"),
            email=pick("email"),
            website=pick("website"),
            description=pick("description"),
            services=_decode_json(pick("services"), []),
            hours=_decode_json(pick("hours", "business_hours"), {}),
            rating=_as_float(pick("rating")),
            review_count=_as_int(pick("review_count", "reviewCount")),
            verified=_as_bool(pick("verified")),
            premium=_as_bool(pick("premium")),
            status=pick("status") or "active",
            image=pick("image"),
            logo_url=pick("logo_url", "logoUrl", "logo"),
            established=pick("established"),
            site_id=pick("site_id", "siteId"),
            latitude=pick("latitude"),
            longitude=pick("longitude"),
            created_at=pick("created_at"),
            updated_at=pick("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def ranking_key(record: BusinessRecord) -> Tuple[bool, bool, float, str, str]:
    """Sort key: premium first, then verified, then rating desc, then name asc, then id."""
    return (not record.premium, not record.verified, -record.rating, record.name, record.id)


def rank_businesses(records: Iterable[BusinessRecord]) -> List[BusinessRecord]:
    """
    Apply the directory's display ranking.

    Every backend routes its results through this function so that swapping
    providers never changes the displayed order.
    """
    return sorted(records, key=ranking_key)


def filter_listings(records: Iterable[BusinessRecord], category: str = "", city: str = "") -> List[BusinessRecord]:
    """
    Keep active records whose category and city slugs match, ranked.

    Backends filter loosely on the server; this is the exact match every
    backend applies last, so the same rows give the same listing anywhere.
    An empty category or city matches everything.
    """
    category_key = normalize_slug(category)
    city_key = normalize_slug(city)
    return rank_businesses(
        record for record in records
        if record.status == "active"
        and (not category_key or record.category == category_key)
        and (not city_key or record.city == city_key)
    )


@dataclass
class BusinessSubmission:
    """Domain entity representing a request to list a business."""

    name: str
    category: str
    city: str
    state: Optional[str] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None
    services: List[str] = field(default_factory=list)
    hours: Dict[str, str] = field(default_factory=dict)
    submitter_name: Optional[str] = None
    submitter_email: Optional[str] = None
    submitter_phone: Optional[str] = None

    def __post_init__(self):
        """Validate submission entity."""
        if not self.name or not str(self.name).strip():
            raise ValueError("name is required")
        if not self.category or not str(self.category).strip():
            raise ValueError("category is required")
        if not self.city or not str(self.city).strip():
            raise ValueError("city is required")

    @property
    def site_id(self) -> str:
        return f"{normalize_slug(self.category)}.{normalize_slug(self.city)}"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "BusinessSubmission":
        """
        Build a submission from a camelCase or snake_case request body.

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        if not isinstance(payload, dict):
            raise ValueError("submission must be a JSON object")

        def optional(*keys: str) -> Optional[str]:
            value = next((payload[key] for key in keys if payload.get(key) not in (None, "")), None)
            return _optional_text(value, keys[0])

        return cls(
            name=_text(payload.get("name") or payload.get("businessName"), "name"),
            category=_text(payload.get("category"), "category"),
            city=_text(payload.get("city"), "city"),
            state=optional("state"),
            description=optional("description"),
            phone=optional("phone"),
            email=optional("email"),
            website=optional("website"),
            address=optional("address"),
            zip_code=optional("zip_code", "zipCode", "zip"),
            services=_parse_services(payload.get("services")),
            hours=_parse_hours(payload.get("hours") or payload.get("businessHours")),
            submitter_name=optional("submitter_name", "submitterName"),
            submitter_email=optional("submitter_email", "submitterEmail"),
            submitter_phone=optional("submitter_phone", "submitterPhone"),
        )


@dataclass
class ContactSubmission:
    """Domain entity representing a contact form message."""

    name: str
    email: str
    message: str
    subject: str = "Contact Form Submission"
    category: Optional[str] = None
    city: Optional[str] = None

    def __post_init__(self):
        """Validate contact entity."""
        for field_name in ("name", "email", "message", "subject"):
            if not isinstance(getattr(self, field_name), str):
                raise ValueError(f"{field_name} must be a string")
        for field_name in ("category", "city"):
            if getattr(self, field_name) is not None and not isinstance(getattr(self, field_name), str):
                raise ValueError(f"{field_name} must be a string")
        if not self.name.strip():
            raise ValueError("name is required")
        if "@" not in self.email:
            raise ValueError("a valid email is required")
        if not self.message.strip():
            raise ValueError("message is required")


@dataclass
class SubmissionResult:
    """Outcome of a submission write."""

    success: bool
    id: Optional[str] = None
    message: str = ""
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.debug(f"Ignoring malformed event timestamp: {value[:40]}")
    return datetime.now(timezone.utc)


@dataclass
class EngagementEvent:
    """Domain entity representing a user interaction with a listing."""

    event_type: str
    business_id: Optional[str] = None
    event_data: Dict[str, Any] = field(default_factory=dict)
    session_id: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        """Validate engagement event."""
        if not self.event_type or not isinstance(self.event_type, str):
            raise ValueError("event_type is required")
        if not isinstance(self.event_data, dict):
            raise ValueError("event_data must be an object")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "EngagementEvent":
        """
        Build an event from a camelCase or snake_case request body.

        Raises:
            ValueError: If the payload is malformed
        """
        if not isinstance(payload, dict):
            raise ValueError("engagement payload must be an object")

        event_data = payload.get("event_data") or payload.get("eventData") or {}
        return cls(
            event_type=payload.get("event_type") or payload.get("eventType") or "",
            business_id=_optional_text(payload.get("business_id") or payload.get("businessId"), "business_id"),
            event_data=dict(event_data) if isinstance(event_data, dict) else event_data,
            session_id=_optional_text(payload.get("session_id") or payload.get("userSessionId"), "session_id"),
            user_agent=_optional_text(payload.get("user_agent"), "user_agent"),
            ip_address=_optional_text(payload.get("ip_address"), "ip_address"),
            timestamp=_parse_timestamp(payload.get("timestamp")),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for transport (Celery, HTTP)."""
        return {
            "event_type": self.event_type,
            "business_id": self.business_id,
            "event_data": self.event_data,
            "session_id": self.session_id,
            "user_agent": self.user_agent,
            "ip_address": self.ip_address,
            "timestamp": self.timestamp.isoformat(),
        }
