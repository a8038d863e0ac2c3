"""
Feedbin API client

Submits one bookmark at a time to Feedbin: creates a page entry and,
for bookmarks that were archived in Pocket, marks the entry as read.
No retries happen here; the import driver owns that decision.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .data_models import DEFAULT_ARCHIVE_STATUSES, BookmarkRecord, Credentials, SubmitOutcome
from ..config.pydantic_config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT
from ..utils.error_handler import (
    InvalidRecordError,
    NetworkUnreachableError,
    RemoteRejectedError,
    SubmitError,
)
from ..utils.secure_logging import secure_logger

PAGES_PATH = "/v2/pages.json"
UNREAD_ENTRIES_PATH = "/v2/unread_entries.json"
AUTHENTICATION_PATH = "/v2/authentication.json"


class MarkReadFailurePolicy(str, Enum):
    """What a failed mark-as-read call means for the item."""

    FAIL = "fail"  # The item fails even though the entry was created
    WARN = "warn"  # The item succeeds with a warning attached


class FeedbinClient:
    """Thin synchronous client for the Feedbin v2 API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        archive_statuses: Iterable[str] = DEFAULT_ARCHIVE_STATUSES,
        mark_read_failure: MarkReadFailurePolicy = MarkReadFailurePolicy.FAIL,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Feedbin API root
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header value
            archive_statuses: Status labels that trigger mark-as-read
            mark_read_failure: Policy for mark-as-read rejections
            session: Optional pre-built session (tests inject mocks here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.archive_statuses = tuple(archive_statuses)
        self.mark_read_failure = MarkReadFailurePolicy(mark_read_failure)
        self.session = session or self._create_session()
        self.logger = logging.getLogger(__name__)

    def __enter__(self) -> "FeedbinClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Clean up resources"""
        self.session.close()

    def _create_session(self) -> requests.Session:
        """Create configured requests session"""
        session = requests.Session()

        # One retry for failed connects only; read and status retries could
        # submit an item twice
        retry_strategy = Retry(total=None, connect=1, read=0, status=0, other=0)
        adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=1, pool_maxsize=1)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": "application/json",
                "Content-Type": "application/json; charset=utf-8",
            }
        )
        return session

    def _request(
        self,
        method: str,
        path: str,
        credentials: Credentials,
        payload: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Send one authenticated request, mapping transport failures."""
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(
                method,
                url,
                json=payload,
                auth=credentials.basic_auth(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkUnreachableError(
                f"Timeout after {self.timeout}s talking to Feedbin"
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkUnreachableError(
                f"Could not reach Feedbin: {secure_logger.sanitize_message(e)}"
            ) from e

    @staticmethod
    def check_record(record: BookmarkRecord) -> None:
        """
        Field checks deferred from CSV validation.

        Raises:
            InvalidRecordError: If the title is empty or the URL is not an
                absolute http(s) URL
        """
        if not record.title.strip():
            raise InvalidRecordError("Failed to import item: title is required")

        url = record.url.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidRecordError(f"Failed to import item: invalid URL '{url}'")

    def create_page(self, credentials: Credentials, record: BookmarkRecord) -> int:
        """
        Create a Feedbin page entry for the bookmark.

        Returns:
            The id of the created entry

        Raises:
            InvalidRecordError, RemoteRejectedError, NetworkUnreachableError
        """
        self.check_record(record)

        response = self._request(
            "POST",
            PAGES_PATH,
            credentials,
            {"url": record.url.strip(), "title": record.title},
        )
        if not response.ok:
            raise RemoteRejectedError(response.status_code, response.reason)

        try:
            entry_id = response.json()["id"]
        except (ValueError, KeyError, TypeError):
            entry_id = None
        if not isinstance(entry_id, int) or isinstance(entry_id, bool):
            raise RemoteRejectedError(
                response.status_code, "response did not include an entry id"
            )

        self.logger.debug(f"Created entry {entry_id}")
        return entry_id

    def mark_read(self, credentials: Credentials, entry_id: int) -> None:
        """
        Mark an entry as read by deleting it from the unread list.

        Raises:
            RemoteRejectedError, NetworkUnreachableError
        """
        response = self._request(
            "DELETE",
            UNREAD_ENTRIES_PATH,
            credentials,
            {"unread_entries": [entry_id]},
        )
        if not response.ok:
            raise RemoteRejectedError(
                response.status_code, response.reason, operation="mark_read"
            )

    def submit_one(self, credentials: Credentials, record: BookmarkRecord) -> SubmitOutcome:
        """
        Create the entry and, for archived bookmarks, mark it read.

        With the FAIL policy a failed mark-read fails the whole item
        although the entry already exists remotely. With WARN, a rejection
        or an unreachable API only attaches a warning.
        """
        entry_id = self.create_page(credentials, record)

        if not record.is_archived(self.archive_statuses):
            return SubmitOutcome(entry_id=entry_id)

        try:
            self.mark_read(credentials, entry_id)
        except SubmitError as e:
            if self.mark_read_failure == MarkReadFailurePolicy.FAIL:
                raise
            warning = f"Entry {entry_id} created but not marked read: {e}"
            secure_logger.warning(warning)
            return SubmitOutcome(entry_id=entry_id, marked_read=False, warning=warning)

        return SubmitOutcome(entry_id=entry_id, marked_read=True)

    def verify_credentials(self, credentials: Credentials) -> bool:
        """
        Check the credentials against Feedbin without creating anything.

        Returns:
            True when Feedbin accepts them, False on 401

        Raises:
            RemoteRejectedError: For any other non-success status
            NetworkUnreachableError: If Feedbin cannot be reached
        """
        response = self._request("GET", AUTHENTICATION_PATH, credentials)
        if response.status_code == 200:
            return True
        if response.status_code == 401:
            return False
        raise RemoteRejectedError(response.status_code, response.reason, operation="verify")
