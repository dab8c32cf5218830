"""Fixture-backed data provider reading bundled JSON data."""
import dataclasses
import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from nearme.domain.entities.business import (
    BusinessRecord,
    BusinessSubmission,
    ContactSubmission,
    EngagementEvent,
    SubmissionResult,
    filter_listings,
    normalize_slug,
    rank_businesses,
)
from nearme.domain.exceptions import ConfigurationError, QueryFailed
from nearme.domain.interfaces.data_provider import ISupportsMaintenance
from nearme.infrastructure.providers.base_provider import BaseDataProvider
from nearme.middleware.monitoring import track_provider_query


DEFAULT_FIXTURE_PATH = Path(__file__).resolve().parents[2] / "data" / "businesses.json"


class FixtureProvider(BaseDataProvider, ISupportsMaintenance):
    """
    Data provider serving the bundled JSON fixture.

    Listings are loaded once at construction. Writes (submissions, contact
    messages, engagement events) live in stores owned by this instance, so
    they last as long as the factory keeps the instance alive.
    """

    kind = "json"

    def __init__(self, fixture_path: Optional[Union[str, Path]] = None):
        """
        Initialize the provider.

        Args:
            fixture_path: JSON fixture file (defaults to the bundled data)

        Raises:
            ConfigurationError: If the fixture is missing or not valid JSON
        """
        super().__init__()
        self.fixture_path = Path(fixture_path) if fixture_path else DEFAULT_FIXTURE_PATH
        rows, settings, neighborhoods = self._load(self.fixture_path)

        self._lock = threading.Lock()
        self._businesses: List[BusinessRecord] = [BusinessRecord.from_row(row) for row in rows]
        self._settings: Dict[str, Any] = settings
        self._neighborhoods: Dict[str, List[str]] = {
            normalize_slug(city): list(names) for city, names in neighborhoods.items()
        }
        self._submissions: Dict[str, Dict[str, Any]] = {}
        self._contact_messages: Dict[str, Dict[str, Any]] = {}
        self._events: List[EngagementEvent] = []
        self._logger.info(f"FixtureProvider loaded {len(self._businesses)} businesses from {self.fixture_path}")

    @staticmethod
    def _load(path: Path):
        try:
            with path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Fixture file not found: {path}") from e
        except ValueError as e:
            raise ConfigurationError(f"Fixture file is not valid JSON: {path}") from e

        if isinstance(data, list):
            return data, {}, {}
        if isinstance(data, dict):
            return data.get("businesses", []), data.get("settings", {}), data.get("neighborhoods", {})
        raise ConfigurationError(f"Unsupported fixture layout in {path}")

    def _snapshot(self) -> List[BusinessRecord]:
        with self._lock:
            return list(self._businesses)

    @track_provider_query("get_businesses")
    def get_businesses(self, category: str, city: str = "") -> List[BusinessRecord]:
        matches = filter_listings(self._snapshot(), category, city)
        return [dataclasses.replace(record) for record in matches]

    @track_provider_query("get_all_businesses")
    def get_all_businesses(self) -> List[BusinessRecord]:
        return rank_businesses(dataclasses.replace(record) for record in self._snapshot())

    @track_provider_query("get_business_by_id")
    def get_business_by_id(self, business_id: str) -> Optional[BusinessRecord]:
        records = self._snapshot()
        # Listing id wins over the originating submission id
        for record in records:
            if record.id == business_id:
                return dataclasses.replace(record)
        for record in records:
            if record.business_id == business_id:
                return dataclasses.replace(record)
        return None

    @track_provider_query("get_categories")
    def get_categories(self) -> List[str]:
        return sorted({r.category for r in self._snapshot() if r.status == "active" and r.category})

    @track_provider_query("get_cities")
    def get_cities(self) -> List[str]:
        return sorted({r.city for r in self._snapshot() if r.status == "active" and r.city})

    @track_provider_query("get_services")
    def get_services(self, category: str) -> List[str]:
        """Services offered by the active listings of ``category``."""
        if not normalize_slug(category):
            return []
        listings = filter_listings(self._snapshot(), category)
        return sorted({service for record in listings for service in record.services if service})

    @track_provider_query("get_neighborhoods")
    def get_neighborhoods(self, city: str) -> List[str]:
        return sorted(set(self._neighborhoods.get(normalize_slug(city), [])))

    def _record_engagement(self, event: EngagementEvent) -> None:
        with self._lock:
            self._events.append(event)

    def get_engagement_events(self) -> List[EngagementEvent]:
        """Return a copy of the recorded engagement events."""
        with self._lock:
            return list(self._events)

    @track_provider_query("submit_business")
    def submit_business(self, submission: BusinessSubmission) -> SubmissionResult:
        submission_id = self._new_id("business")
        row = {
            "id": submission_id,
            "name": submission.name,
            "category": normalize_slug(submission.category),
            "city": normalize_slug(submission.city),
            "state": submission.state,
            "description": submission.description,
            "phone": submission.phone,
            "email": submission.email,
            "website": submission.website,
            "address": submission.address,
            "zip_code": submission.zip_code,
            "services": list(submission.services),
            "hours": dict(submission.hours),
            "submitter_name": submission.submitter_name,
            "submitter_email": submission.submitter_email,
            "submitter_phone": submission.submitter_phone,
            "site_id": submission.site_id,
            "status": "pending",
            "created_at": _now(),
        }
        with self._lock:
            self._submissions[submission_id] = row
        return SubmissionResult(
            success=True,
            id=submission_id,
            message="Business submission received successfully",
        )

    @track_provider_query("submit_contact")
    def submit_contact(self, contact: ContactSubmission) -> SubmissionResult:
        message_id = self._new_id("contact")
        with self._lock:
            self._contact_messages[message_id] = {
                "id": message_id,
                **dataclasses.asdict(contact),
                "status": "new",
                "created_at": _now(),
            }
        return SubmissionResult(success=True, id=message_id, message="Thank you for your message!")

    @track_provider_query("get_contact_messages")
    def get_contact_messages(self) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [dict(row) for row in self._contact_messages.values()]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)

    @track_provider_query("resolve_contact_message")
    def resolve_contact_message(
        self,
        message_id: str,
        resolved_by: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> None:
        with self._lock:
            message = self._contact_messages.get(message_id)
            if message is None:
                raise QueryFailed(f"Contact message not found: {message_id}", backend=self.kind, status_code=404)
            message.update({
                "status": "resolved",
                "resolved_at": _now(),
                "resolved_by": resolved_by,
                "admin_notes": admin_notes,
            })

    @track_provider_query("get_business_submissions")
    def get_business_submissions(self) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [dict(row) for row in self._submissions.values()]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)

    @track_provider_query("approve_business_submission")
    def approve_business_submission(self, submission_id: str, reviewer_notes: Optional[str] = None) -> None:
        with self._lock:
            submission = self._review(submission_id, "approved", reviewer_notes or "Approved by admin")
            already_listed = any(
                r.name == submission["name"] and r.city == submission["city"] for r in self._businesses
            )
            if not already_listed:
                record = BusinessRecord.from_row({
                    **submission,
                    "id": f"{submission['category']}-{submission['city']}-{submission_id}",
                    "business_id": submission_id,
                    "status": "active",
                    "verified": True,
                })
                # Copy-on-write so concurrent readers keep a consistent list
                self._businesses = self._businesses + [record]

    @track_provider_query("reject_business_submission")
    def reject_business_submission(self, submission_id: str, reviewer_notes: Optional[str] = None) -> None:
        with self._lock:
            self._review(submission_id, "rejected", reviewer_notes or "Rejected by admin")

    def _review(self, submission_id: str, status: str, reviewer_notes: str) -> Dict[str, Any]:
        submission = self._submissions.get(submission_id)
        if submission is None:
            raise QueryFailed(f"Submission not found: {submission_id}", backend=self.kind, status_code=404)
        submission.update({"status": status, "reviewed_at": _now(), "reviewer_notes": reviewer_notes})
        return submission

    @track_provider_query("get_setting")
    def get_setting(self, key: str) -> Optional[Any]:
        return self._settings.get(key)

    def clear_sample_engagement_data(self, identifier: str) -> int:
        with self._lock:
            kept = [e for e in self._events if identifier not in json.dumps(e.event_data, default=str)]
            removed = len(self._events) - len(kept)
            self._events = kept
        self._logger.info(f"Cleared {removed} sample engagement events tagged {identifier!r}")
        return removed


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
