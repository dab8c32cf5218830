"""Shared behaviour for data provider implementations."""
import logging
import time
import uuid
from abc import abstractmethod

from nearme.domain.entities.business import EngagementEvent
from nearme.domain.exceptions import TrackingFailure
from nearme.domain.interfaces.data_provider import IDataProvider
from nearme.middleware.monitoring import track_engagement_failure


class BaseDataProvider(IDataProvider):
    """
    Base class implementing the fire-and-forget engagement policy.

    Subclasses write events in ``_record_engagement``; whatever it raises is
    logged, counted and dropped here.
    """

    def __init__(self):
        self._logger = logging.getLogger(self.__class__.__module__)

    def track_engagement(self, event: EngagementEvent) -> None:
        """Record an engagement event; never raises."""
        try:
            self._record_engagement(event)
        except Exception as e:
            failure = e if isinstance(e, TrackingFailure) else TrackingFailure(str(e))
            self._logger.warning(f"Engagement tracking failed on {self.kind} backend: {failure}")
            track_engagement_failure(self.kind)

    @abstractmethod
    def _record_engagement(self, event: EngagementEvent) -> None:
        """
        Write an engagement event to the backend.

        Raises:
            TrackingFailure: If the event could not be written
        """
        pass

    @staticmethod
    def _new_id(prefix: str) -> str:
        """Generate a record id in the ``{prefix}_{millis}_{random}`` format."""
        return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"
