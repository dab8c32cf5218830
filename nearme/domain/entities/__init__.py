"""Domain entities - core business objects."""
from nearme.domain.entities.subdomain import SubdomainInfo
from nearme.domain.entities.world import WorldKind
from nearme.domain.entities.business import (
    BusinessRecord,
    BusinessSubmission,
    ContactSubmission,
    EngagementEvent,
    SubmissionResult,
    normalize_slug,
    rank_businesses,
)

__all__ = [
    "SubdomainInfo",
    "WorldKind",
    "BusinessRecord",
    "BusinessSubmission",
    "ContactSubmission",
    "EngagementEvent",
    "SubmissionResult",
    "normalize_slug",
    "rank_businesses",
]
