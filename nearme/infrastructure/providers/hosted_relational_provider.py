"""Data provider for the hosted Postgres database exposed through PostgREST."""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from nearme.domain.entities.business import (
    BusinessRecord,
    BusinessSubmission,
    ContactSubmission,
    EngagementEvent,
    SubmissionResult,
    filter_listings,
    normalize_slug,
    rank_businesses,
    slug_pattern,
)
from nearme.domain.exceptions import QueryFailed, TrackingFailure
from nearme.infrastructure.clients.backend_http_client import BackendHTTPClient
from nearme.infrastructure.providers.base_provider import BaseDataProvider
from nearme.middleware.monitoring import track_provider_query


_ORDER = "premium.desc,verified.desc,rating.desc,name.asc,id.asc"


class HostedRelationalProvider(BaseDataProvider):
    """
    Data provider backed by the hosted relational database's REST interface.

    Tables are addressed as ``/rest/v1/{table}``. Row-level security
    rejections come back as 401/403 and surface as ``QueryFailed``.
    """

    kind = "supabase"

    def __init__(self, api_base_url: str, api_key: str, timeout: float = 10, retry_attempts: int = 2):
        super().__init__()
        self.client = BackendHTTPClient(
            base_url=api_base_url,
            backend=self.kind,
            headers={"apikey": api_key, "Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            retry_attempts=retry_attempts,
        )
        self._logger.info(f"HostedRelationalProvider initialized for {self.client.base_url}")

    def close(self) -> None:
        self.client.close()

    def _select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        rows = self.client.request("GET", f"/rest/v1/{table}", params={"select": "*", **params})
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise QueryFailed(f"Unexpected response shape from {table}", backend=self.kind)
        return rows

    def _insert(self, table: str, row: Dict[str, Any], returning: bool = True) -> Optional[Dict[str, Any]]:
        prefer = "return=representation" if returning else "return=minimal"
        body = self.client.request("POST", f"/rest/v1/{table}", json_data=row, headers={"Prefer": prefer})
        if isinstance(body, list):
            return body[0] if body else None
        return body

    def _update(self, table: str, row_id: str, values: Dict[str, Any]) -> List[Dict[str, Any]]:
        body = self.client.request(
            "PATCH",
            f"/rest/v1/{table}",
            params={"id": f"eq.{row_id}"},
            json_data=values,
            headers={"Prefer": "return=representation"},
        )
        return body if isinstance(body, list) else []

    @track_provider_query("get_businesses")
    def get_businesses(self, category: str, city: str = "") -> List[BusinessRecord]:
        params = {"status": "eq.active", "order": _ORDER}
        for column, value in (("category", category), ("city", city)):
            if normalize_slug(value):
                # "*" is PostgREST's ilike wildcard; stored values may be display names
                params[column] = f"ilike.{slug_pattern(normalize_slug(value), '*')}"

        records = [BusinessRecord.from_row(row) for row in self._select("businesses", params)]
        return filter_listings(records, category, city)

    @track_provider_query("get_all_businesses")
    def get_all_businesses(self) -> List[BusinessRecord]:
        rows = self._select("businesses", {"order": _ORDER})
        return rank_businesses(BusinessRecord.from_row(row) for row in rows)

    @track_provider_query("get_business_by_id")
    def get_business_by_id(self, business_id: str) -> Optional[BusinessRecord]:
        quoted = '"{}"'.format(str(business_id).replace('"', '\\"'))
        rows = self._select("businesses", {"or": f"(id.eq.{quoted},business_id.eq.{quoted})"})
        if not rows:
            return None
        # Listing id wins over the originating submission id
        row = next((row for row in rows if str(row.get("id")) == str(business_id)), rows[0])
        return BusinessRecord.from_row(row)

    @track_provider_query("get_categories")
    def get_categories(self) -> List[str]:
        rows = self.client.request(
            "GET", "/rest/v1/businesses", params={"select": "category", "status": "eq.active"}
        ) or []
        return sorted({normalize_slug(row.get("category")) for row in rows} - {""})

    @track_provider_query("get_cities")
    def get_cities(self) -> List[str]:
        rows = self.client.request(
            "GET", "/rest/v1/businesses", params={"select": "city", "status": "eq.active"}
        ) or []
        return sorted({normalize_slug(row.get("city")) for row in rows} - {""})

    @track_provider_query("get_services")
    def get_services(self, category: str) -> List[str]:
        return self._names_for("services", "service_name", "category", category)

    @track_provider_query("get_neighborhoods")
    def get_neighborhoods(self, city: str) -> List[str]:
        return self._names_for("neighborhoods", "neighborhood_name", "city", city)

    def _names_for(self, table: str, name_column: str, slug_column: str, value: str) -> List[str]:
        key = normalize_slug(value)
        if not key:
            return []
        rows = self._select(table, {
            "select": f"{name_column},{slug_column}",
            slug_column: f"ilike.{slug_pattern(key, '*')}",
            "order": f"{name_column}.asc",
        })
        return sorted({
            row[name_column] for row in rows
            if row.get(name_column) and normalize_slug(row.get(slug_column)) == key
        })

    @track_provider_query("get_contact_messages")
    def get_contact_messages(self) -> List[Dict[str, Any]]:
        return self._select("contact_messages", {"order": "created_at.desc"})

    @track_provider_query("resolve_contact_message")
    def resolve_contact_message(
        self,
        message_id: str,
        resolved_by: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> None:
        rows = self._update(
            "contact_messages",
            message_id,
            {
                "status": "resolved",
                "resolved_at": datetime.now(timezone.utc).isoformat(),
                "resolved_by": resolved_by,
                "admin_notes": admin_notes,
            },
        )
        if not rows:
            raise QueryFailed(f"Contact message not found: {message_id}", backend=self.kind, status_code=404)

    def _record_engagement(self, event: EngagementEvent) -> None:
        try:
            self._insert(
                "user_engagement_events",
                {
                    "business_id": event.business_id,
                    "event_type": event.event_type,
                    "event_data": event.event_data,
                    "timestamp": event.timestamp.isoformat(),
                    "user_agent": event.user_agent,
                    "ip_address": event.ip_address,
                    "session_id": event.session_id,
                },
                returning=False,
            )
        except QueryFailed as e:
            raise TrackingFailure(f"Could not write engagement event: {e}") from e

    @track_provider_query("submit_business")
    def submit_business(self, submission: BusinessSubmission) -> SubmissionResult:
        submission_id = str(uuid.uuid4())
        self._insert(
            "business_submissions",
            {
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
                "zip": submission.zip_code,
                "services": submission.services or None,
                "business_hours": submission.hours or None,
                "submitter_name": submission.submitter_name,
                "submitter_email": submission.submitter_email,
                "submitter_phone": submission.submitter_phone,
                "site_id": submission.site_id,
                "status": "pending",
            },
            returning=False,
        )
        return SubmissionResult(
            success=True,
            id=submission_id,
            message="Business submission received successfully",
        )

    @track_provider_query("submit_contact")
    def submit_contact(self, contact: ContactSubmission) -> SubmissionResult:
        row = self._insert(
            "contact_messages",
            {
                "name": contact.name,
                "email": contact.email,
                "subject": contact.subject,
                "message": contact.message,
                "category": contact.category,
                "city": contact.city,
                "status": "new",
            },
        )
        message_id = str(row["id"]) if row and row.get("id") is not None else None
        return SubmissionResult(success=True, id=message_id, message="Thank you for your message!")

    @track_provider_query("get_business_submissions")
    def get_business_submissions(self) -> List[Dict[str, Any]]:
        return self._select("business_submissions", {"order": "created_at.desc"})

    @track_provider_query("approve_business_submission")
    def approve_business_submission(self, submission_id: str, reviewer_notes: Optional[str] = None) -> None:
        submission = self._review(submission_id, "approved", reviewer_notes)

        category = normalize_slug(submission.get("category"))
        city = normalize_slug(submission.get("city"))
        existing = self._select(
            "businesses", {"name": f"eq.{submission.get('name')}", "city": f"eq.{city}", "limit": "1"}
        )
        if existing:
            self._logger.info(f"Submission {submission_id} already listed as {existing[0].get('id')}")
            return

        self._insert(
            "businesses",
            {
                "id": f"{category}-{city}-{submission_id}",
                "business_id": submission_id,
                "name": submission.get("name"),
                "category": category,
                "city": city,
                "state": submission.get("state"),
                "address": submission.get("address"),
                "zip_code": submission.get("zip"),
                "phone": submission.get("phone"),
                "email": submission.get("email"),
                "website": submission.get("website"),
                "description": submission.get("description"),
                "services": submission.get("services"),
                "hours": submission.get("business_hours"),
                "verified": True,
                "premium": False,
                "status": "active",
                "site_id": f"{category}.{city}",
            },
            returning=False,
        )

    @track_provider_query("reject_business_submission")
    def reject_business_submission(self, submission_id: str, reviewer_notes: Optional[str] = None) -> None:
        self._review(submission_id, "rejected", reviewer_notes)

    def _review(self, submission_id: str, status: str, reviewer_notes: Optional[str]) -> Dict[str, Any]:
        rows = self._update(
            "business_submissions",
            submission_id,
            {
                "status": status,
                "reviewed_at": datetime.now(timezone.utc).isoformat(),
                "reviewer_notes": reviewer_notes,
            },
        )
        if not rows:
            raise QueryFailed(f"Submission not found: {submission_id}", backend=self.kind, status_code=404)
        return rows[0]

    @track_provider_query("get_setting")
    def get_setting(self, key: str) -> Optional[Any]:
        rows = self._select("admin_settings", {"setting_key": f"eq.{key}", "limit": "1"})
        return rows[0].get("setting_value") if rows else None
