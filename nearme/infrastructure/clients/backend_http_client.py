"""HTTP transport shared by the remote data providers."""
import json
import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from nearme.domain.exceptions import BackendUnavailable, QueryFailed


logger = logging.getLogger(__name__)

# Gateway statuses mean the backend itself could not be reached
_UNAVAILABLE_STATUSES = (502, 503, 504)


class BackendHTTPClient:
    """
    Pooled HTTP client for a single backend.

    Translates transport failures into ``BackendUnavailable`` and rejected
    requests into ``QueryFailed``. Holds only immutable settings and a
    connection-pooled session, so one instance serves concurrent callers.
    """

    def __init__(
        self,
        base_url: str,
        backend: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 10,
        retry_attempts: int = 2,
    ):
        """
        Initialize the client.

        Args:
            base_url: Backend base URL
            backend: Backend name used in errors and logs
            headers: Default headers sent with every request
            timeout: Per-request timeout in seconds
            retry_attempts: Retries for connection errors and idempotent reads
        """
        self.base_url = base_url.rstrip("/")
        self.backend = backend
        self.timeout = timeout
        self._default_headers = dict(headers or {})
        self._logger = logging.getLogger(__name__)
        self.session = self._create_session(retry_attempts)

    def _create_session(self, retry_attempts: int) -> requests.Session:
        """Create a requests session with retry strategy and connection pooling."""
        session = requests.Session()

        retry_strategy = Retry(
            total=retry_attempts,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "HEAD"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=20,
            pool_maxsize=20,
            pool_block=False,
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Make an HTTP request and decode the JSON response.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Endpoint relative to base_url
            params: Optional query parameters
            json_data: Optional JSON body
            headers: Extra headers for this request

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            BackendUnavailable: On connection errors, timeouts and gateway errors
            QueryFailed: On any other non-2xx response or a non-JSON body
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        request_headers = {"Accept": "application/json", **self._default_headers, **(headers or {})}
        if json_data is not None:
            request_headers.setdefault("Content-Type", "application/json")

        self._logger.debug(f"Request: {method} {url} params={params}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=request_headers,
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            self._logger.error(f"{self.backend} request timed out after {self.timeout}s: {method} {url}")
            raise BackendUnavailable(f"{self.backend} timed out", backend=self.backend) from e
        except requests.exceptions.RequestException as e:
            self._logger.error(f"{self.backend} request failed: {method} {url} - {e}")
            raise BackendUnavailable(f"{self.backend} unreachable: {e}", backend=self.backend) from e

        self._logger.debug(f"Status Code: {response.status_code}")

        if response.status_code in _UNAVAILABLE_STATUSES:
            self._logger.error(f"{self.backend} gateway error {response.status_code}: {method} {url}")
            raise BackendUnavailable(
                f"{self.backend} returned {response.status_code}", backend=self.backend
            )

        if response.status_code >= 400:
            self._logger.error(f"{self.backend} HTTP error {response.status_code}: {method} {url}")
            self._logger.error(f"Response text: {response.text[:500]}")
            raise QueryFailed(
                self._error_message(response),
                backend=self.backend,
                status_code=response.status_code,
            )

        if not response.text:
            return None

        try:
            return response.json()
        except ValueError as e:
            self._logger.error(f"Non-JSON response from {method} {url}: {response.text[:200]}")
            raise QueryFailed(
                f"Expected JSON response from {self.backend}",
                backend=self.backend,
                status_code=response.status_code,
            ) from e

    def _error_message(self, response: requests.Response) -> str:
        """Extract the most useful error text from a failed response."""
        try:
            body = response.json()
        except ValueError:
            return f"{self.backend} returned {response.status_code}: {response.text[:200]}"
        if isinstance(body, dict):
            for key in ("error", "message", "hint", "details"):
                if body.get(key):
                    detail = body[key]
                    if not isinstance(detail, str):
                        detail = json.dumps(detail, default=str)
                    return f"{self.backend} returned {response.status_code}: {detail}"
        return f"{self.backend} returned {response.status_code}"

    def close(self) -> None:
        """Close pooled connections."""
        self.session.close()
