"""Data provider for the edge SQL database behind the /api/query endpoint."""
import json
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
from nearme.domain.interfaces.data_provider import ISupportsMaintenance
from nearme.infrastructure.clients.backend_http_client import BackendHTTPClient
from nearme.infrastructure.providers.base_provider import BaseDataProvider
from nearme.middleware.monitoring import track_provider_query


_ORDER_BY = "ORDER BY premium DESC, verified DESC, rating DESC, name ASC, id ASC"


class EdgeQueryProvider(BaseDataProvider, ISupportsMaintenance):
    """
    Data provider issuing parameterized SQL to the edge database.

    Every statement is sent as ``POST /api/query`` with a ``{"sql", "params"}``
    body; the endpoint answers ``{"success": true, "data": [...]}``.
    """

    kind = "d1"

    def __init__(self, api_base_url: str, api_key: str, timeout: float = 10, retry_attempts: int = 2):
        """
        Initialize the provider.

        Args:
            api_base_url: Base URL of the deployment exposing /api/query
            api_key: Bearer key accepted by the query endpoint
            timeout: Per-request timeout in seconds
            retry_attempts: Transport retries for connection failures
        """
        super().__init__()
        self.client = BackendHTTPClient(
            base_url=api_base_url,
            backend=self.kind,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            retry_attempts=retry_attempts,
        )
        self._logger.info(f"EdgeQueryProvider initialized for {self.client.base_url}")

    def close(self) -> None:
        self.client.close()

    def _query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute one statement and return its rows.

        Raises:
            BackendUnavailable: If the endpoint cannot be reached
            QueryFailed: If the endpoint rejects the statement
        """
        body = self.client.request("POST", "/api/query", json_data={"sql": sql, "params": params or []})

        if not isinstance(body, dict):
            raise QueryFailed("Unexpected response shape from query endpoint", backend=self.kind)
        if not body.get("success"):
            raise QueryFailed(f"Query rejected: {body.get('error', 'unknown error')}", backend=self.kind)
        return body.get("data") or []

    @track_provider_query("get_businesses")
    def get_businesses(self, category: str, city: str = "") -> List[BusinessRecord]:
        clauses = ["status = 'active'"]
        params: List[Any] = []
        for column, value in (("category", category), ("city", city)):
            if normalize_slug(value):
                # LIKE is case-insensitive; "%" stands in for any run of separators
                clauses.append(f"{column} LIKE ?")
                params.append(slug_pattern(normalize_slug(value), "%"))

        sql = f"SELECT * FROM businesses WHERE {' AND '.join(clauses)} {_ORDER_BY}"
        rows = self._query(sql, params)
        return filter_listings((BusinessRecord.from_row(row) for row in rows), category, city)

    @track_provider_query("get_all_businesses")
    def get_all_businesses(self) -> List[BusinessRecord]:
        rows = self._query(f"SELECT * FROM businesses {_ORDER_BY}")
        return rank_businesses(BusinessRecord.from_row(row) for row in rows)

    @track_provider_query("get_business_by_id")
    def get_business_by_id(self, business_id: str) -> Optional[BusinessRecord]:
        rows = self._query(
            "SELECT * FROM businesses WHERE id = ? OR business_id = ? ORDER BY (id = ?) DESC LIMIT 1",
            [business_id, business_id, business_id],
        )
        return BusinessRecord.from_row(rows[0]) if rows else None

    @track_provider_query("get_categories")
    def get_categories(self) -> List[str]:
        rows = self._query(
            "SELECT DISTINCT category FROM businesses "
            "WHERE status = 'active' AND category IS NOT NULL AND category != ''"
        )
        return sorted({normalize_slug(row.get("category")) for row in rows} - {""})

    @track_provider_query("get_cities")
    def get_cities(self) -> List[str]:
        rows = self._query(
            "SELECT DISTINCT city FROM businesses "
            "WHERE status = 'active' AND city IS NOT NULL AND city != ''"
        )
        return sorted({normalize_slug(row.get("city")) for row in rows} - {""})

    @track_provider_query("get_services")
    def get_services(self, category: str) -> List[str]:
        return self._names_for(
            "SELECT DISTINCT service_name AS name, category AS slug FROM services "
            "WHERE category LIKE ? ORDER BY service_name ASC",
            category,
        )

    @track_provider_query("get_neighborhoods")
    def get_neighborhoods(self, city: str) -> List[str]:
        return self._names_for(
            "SELECT DISTINCT neighborhood_name AS name, city AS slug FROM neighborhoods "
            "WHERE city LIKE ? ORDER BY neighborhood_name ASC",
            city,
        )

    def _names_for(self, sql: str, value: str) -> List[str]:
        """Run a ``name``/``slug`` lookup and keep names whose slug matches ``value`` exactly."""
        key = normalize_slug(value)
        if not key:
            return []
        rows = self._query(sql, [slug_pattern(key, "%")])
        return sorted({row["name"] for row in rows if row.get("name") and normalize_slug(row.get("slug")) == key})

    def _record_engagement(self, event: EngagementEvent) -> None:
        try:
            self._query(
                "INSERT INTO user_engagement_events "
                "(id, business_id, event_type, event_data, timestamp, user_agent, ip_address, session_id) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    self._new_id("event"),
                    event.business_id,
                    event.event_type,
                    json.dumps(event.event_data, default=str),
                    event.timestamp.isoformat(),
                    event.user_agent,
                    event.ip_address,
                    event.session_id,
                ],
            )
        except (QueryFailed, ValueError) as e:
            raise TrackingFailure(f"Could not write engagement event: {e}") from e

    @track_provider_query("submit_business")
    def submit_business(self, submission: BusinessSubmission) -> SubmissionResult:
        submission_id = self._new_id("business")
        self._query(
            "INSERT INTO business_submissions ("
            "id, name, category, description, phone, website, email, address, city, state, zip, "
            "business_hours, services, submitter_name, submitter_email, submitter_phone, site_id, "
            "created_at, status"
            ") VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, datetime('now'), 'pending')",
            [
                submission_id,
                submission.name,
                normalize_slug(submission.category),
                submission.description,
                submission.phone,
                submission.website,
                submission.email,
                submission.address,
                normalize_slug(submission.city),
                submission.state,
                submission.zip_code,
                json.dumps(submission.hours) if submission.hours else None,
                json.dumps(submission.services) if submission.services else None,
                submission.submitter_name,
                submission.submitter_email,
                submission.submitter_phone,
                submission.site_id,
            ],
        )
        return SubmissionResult(
            success=True,
            id=submission_id,
            message="Business submission received successfully",
        )

    @track_provider_query("submit_contact")
    def submit_contact(self, contact: ContactSubmission) -> SubmissionResult:
        message_id = self._new_id("contact")
        self._query(
            "INSERT INTO contact_messages (id, name, email, subject, message, category, city, status, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, 'new', datetime('now'))",
            [message_id, contact.name, contact.email, contact.subject, contact.message, contact.category, contact.city],
        )
        return SubmissionResult(success=True, id=message_id, message="Thank you for your message!")

    @track_provider_query("get_contact_messages")
    def get_contact_messages(self) -> List[Dict[str, Any]]:
        return self._query("SELECT * FROM contact_messages ORDER BY created_at DESC")

    @track_provider_query("resolve_contact_message")
    def resolve_contact_message(
        self,
        message_id: str,
        resolved_by: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> None:
        if not self._query("SELECT id FROM contact_messages WHERE id = ?", [message_id]):
            raise QueryFailed(f"Contact message not found: {message_id}", backend=self.kind, status_code=404)
        self._query(
            "UPDATE contact_messages SET status = 'resolved', resolved_at = datetime('now'), "
            "resolved_by = ?, admin_notes = ? WHERE id = ?",
            [resolved_by, admin_notes, message_id],
        )

    @track_provider_query("get_business_submissions")
    def get_business_submissions(self) -> List[Dict[str, Any]]:
        return self._query("SELECT * FROM business_submissions ORDER BY created_at DESC")

    @track_provider_query("approve_business_submission")
    def approve_business_submission(self, submission_id: str, reviewer_notes: Optional[str] = None) -> None:
        submission = self._get_submission(submission_id)
        self._set_review_status(submission_id, "approved", reviewer_notes)

        existing = self._query(
            "SELECT id FROM businesses WHERE name = ? AND city = ? LIMIT 1",
            [submission.get("name"), submission.get("city")],
        )
        if existing:
            self._logger.info(f"Submission {submission_id} already listed as {existing[0].get('id')}")
            return

        category = normalize_slug(submission.get("category"))
        city = normalize_slug(submission.get("city"))
        self._query(
            "INSERT INTO businesses ("
            "id, business_id, name, category, city, state, address, zip_code, phone, email, website, "
            "description, services, hours, rating, review_count, verified, premium, status, site_id, created_at"
            ") VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, 0, 1, 0, 'active', ?, datetime('now'))",
            [
                f"{category}-{city}-{submission_id}",
                submission_id,
                submission.get("name"),
                category,
                city,
                submission.get("state"),
                submission.get("address"),
                submission.get("zip"),
                submission.get("phone"),
                submission.get("email"),
                submission.get("website"),
                submission.get("description"),
                submission.get("services"),
                submission.get("business_hours"),
                f"{category}.{city}",
            ],
        )

    @track_provider_query("reject_business_submission")
    def reject_business_submission(self, submission_id: str, reviewer_notes: Optional[str] = None) -> None:
        self._get_submission(submission_id)
        self._set_review_status(submission_id, "rejected", reviewer_notes)

    def _get_submission(self, submission_id: str) -> Dict[str, Any]:
        rows = self._query("SELECT * FROM business_submissions WHERE id = ?", [submission_id])
        if not rows:
            raise QueryFailed(f"Submission not found: {submission_id}", backend=self.kind, status_code=404)
        return rows[0]

    def _set_review_status(self, submission_id: str, status: str, reviewer_notes: Optional[str]) -> None:
        self._query(
            "UPDATE business_submissions SET status = ?, reviewed_at = datetime('now'), reviewer_notes = ? "
            "WHERE id = ?",
            [status, reviewer_notes, submission_id],
        )

    @track_provider_query("get_setting")
    def get_setting(self, key: str) -> Optional[Any]:
        rows = self._query("SELECT setting_value FROM admin_settings WHERE setting_key = ? LIMIT 1", [key])
        if not rows:
            return None
        value = rows[0].get("setting_value")
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value

    def clear_sample_engagement_data(self, identifier: str) -> int:
        """
        Delete engagement events whose payload mentions ``identifier``.

        Returns:
            -1, the endpoint does not report affected row counts
        """
        self._query("DELETE FROM user_engagement_events WHERE event_data LIKE ?", [f"%{identifier}%"])
        self._logger.info(f"Cleared sample engagement events tagged {identifier!r}")
        return -1
