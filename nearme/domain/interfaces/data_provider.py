"""Interface for directory data providers (Strategy Pattern).

This allows switching between storage backends without touching pages:
- Bundled JSON fixtures
- Edge SQL database behind a query endpoint
- Hosted Postgres with row-level policies
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from nearme.domain.entities.business import (
    BusinessRecord,
    BusinessSubmission,
    ContactSubmission,
    EngagementEvent,
    SubmissionResult,
)


class IDataProvider(ABC):
    """
    Interface for directory data providers following Strategy Pattern.

    Implementations can be swapped without changing page logic. Reads return
    records already ranked premium, verified, rating desc, name asc.
    Implementations must not keep per-call state: a single instance serves
    every concurrent request in the process.
    """

    #: Backend kind used in configuration and metrics labels
    kind: str = ""

    @abstractmethod
    def get_businesses(self, category: str, city: str = "") -> List[BusinessRecord]:
        """
        Get active businesses for a category, optionally narrowed to a city.

        Args:
            category: Category slug or display name (case-insensitive)
            city: City slug or display name; empty means every city

        Returns:
            Ranked list of business records

        Raises:
            BackendUnavailable: If the backend cannot be reached
            QueryFailed: If the backend rejects the query
        """
        pass

    @abstractmethod
    def get_all_businesses(self) -> List[BusinessRecord]:
        """
        Get every business regardless of category or city.

        Returns:
            Ranked list of business records
        """
        pass

    @abstractmethod
    def get_business_by_id(self, business_id: str) -> Optional[BusinessRecord]:
        """
        Get one business.

        Args:
            business_id: Record id

        Returns:
            Business record if found, None otherwise
        """
        pass

    @abstractmethod
    def get_categories(self) -> List[str]:
        """Get distinct category slugs, sorted."""
        pass

    @abstractmethod
    def get_cities(self) -> List[str]:
        """Get distinct city slugs, sorted."""
        pass

    @abstractmethod
    def track_engagement(self, event: EngagementEvent) -> None:
        """
        Record a user engagement event.

        Best effort: failures are logged and swallowed, never raised.

        Args:
            event: Engagement event to record
        """
        pass

    @abstractmethod
    def submit_business(self, submission: BusinessSubmission) -> SubmissionResult:
        """
        Store a business listing request for admin review.

        Args:
            submission: Business submission

        Returns:
            SubmissionResult with success flag and new submission id
        """
        pass

    @abstractmethod
    def submit_contact(self, contact: ContactSubmission) -> SubmissionResult:
        """
        Store a contact form message.

        Args:
            contact: Contact submission

        Returns:
            SubmissionResult with success flag and new message id
        """
        pass

    @abstractmethod
    def get_business_submissions(self) -> List[Dict[str, Any]]:
        """Get all business submissions, newest first."""
        pass

    @abstractmethod
    def approve_business_submission(self, submission_id: str, reviewer_notes: Optional[str] = None) -> None:
        """
        Approve a pending submission.

        Args:
            submission_id: Submission id
            reviewer_notes: Optional admin notes

        Raises:
            QueryFailed: If the submission does not exist or the update is rejected
        """
        pass

    @abstractmethod
    def reject_business_submission(self, submission_id: str, reviewer_notes: Optional[str] = None) -> None:
        """
        Reject a pending submission.

        Args:
            submission_id: Submission id
            reviewer_notes: Optional admin notes

        Raises:
            QueryFailed: If the submission does not exist or the update is rejected
        """
        pass

    @abstractmethod
    def get_services(self, category: str) -> List[str]:
        """
        Get the service names offered under a category.

        Args:
            category: Category slug or display name (case-insensitive)

        Returns:
            Distinct service names, sorted
        """
        pass

    @abstractmethod
    def get_neighborhoods(self, city: str) -> List[str]:
        """
        Get the neighborhood names known for a city.

        Args:
            city: City slug or display name (case-insensitive)

        Returns:
            Distinct neighborhood names, sorted
        """
        pass

    @abstractmethod
    def get_contact_messages(self) -> List[Dict[str, Any]]:
        """Get all contact messages, newest first."""
        pass

    @abstractmethod
    def resolve_contact_message(
        self,
        message_id: str,
        resolved_by: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> None:
        """
        Mark a contact message as resolved.

        Args:
            message_id: Contact message id
            resolved_by: Name of the admin resolving it
            admin_notes: Optional admin notes

        Raises:
            QueryFailed: If the message does not exist or the update is rejected
        """
        pass

    def close(self) -> None:
        """Release transport resources held by the provider."""

    @abstractmethod
    def get_setting(self, key: str) -> Optional[Any]:
        """
        Read an admin setting stored by the backend.

        Args:
            key: Setting key

        Returns:
            Decoded setting value, or None when the backend has no value
        """
        pass


class ISupportsMaintenance(ABC):
    """
    Optional capability for backends that can purge generated sample data.

    Backends declare the capability by inheriting this interface; callers
    check ``isinstance(provider, ISupportsMaintenance)``.
    """

    @abstractmethod
    def clear_sample_engagement_data(self, identifier: str) -> int:
        """
        Delete engagement events tagged as sample data.

        Args:
            identifier: Sample data marker stored in ``event_data["sample_identifier"]``

        Returns:
            Number of events removed (-1 when the backend does not report a count)
        """
        pass
