"""
Data models for the Feedbin Importer.

This module defines the internal data structures used to represent
Pocket bookmarks, parsed tables, credentials and import progress.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import SecretStr
from requests.auth import HTTPBasicAuth

# Columns every Pocket export must carry, in export order
REQUIRED_COLUMNS = ("title", "url", "time_added", "tags", "status")

# Status labels that mean the item was read in Pocket
DEFAULT_ARCHIVE_STATUSES = ("archive",)

# Pocket joins multiple tags with a pipe
TAG_SEPARATOR = "|"


@dataclass(frozen=True)
class BookmarkRecord:
    """
    One bookmark from a Pocket CSV export.

    All fields are kept as the text found in the file. The status label
    is not restricted so that unknown values round-trip unchanged.
    """

    title: str = ""
    url: str = ""
    time_added: str = ""
    tags: str = ""
    status: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BookmarkRecord":
        """
        Create a record from a parsed CSV row.

        Extra columns are ignored; missing cells become empty strings.
        """
        values = {}
        for column in REQUIRED_COLUMNS:
            value = row.get(column, "")
            values[column] = "" if value is None else str(value)
        return cls(**values)

    def is_archived(self, archive_statuses: Iterable[str] = DEFAULT_ARCHIVE_STATUSES) -> bool:
        """Check whether the status marks the bookmark as read."""
        wanted = {s.strip().lower() for s in archive_statuses}
        return self.status.strip().lower() in wanted

    def tag_list(self) -> List[str]:
        """Split the tags field into individual labels."""
        return [t.strip() for t in self.tags.split(TAG_SEPARATOR) if t.strip()]

    def added_at(self) -> Optional[datetime]:
        """Return time_added as an aware UTC datetime, or None if not numeric."""
        try:
            seconds = int(self.time_added.strip())
        except (ValueError, AttributeError):
            return None
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    def format_time_added(self) -> str:
        """Format time_added for display, e.g. 'Jan 5, 2024'."""
        added = self.added_at()
        if added is None:
            return self.time_added
        return f"{added:%b} {added.day}, {added.year}"

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary with the original export columns."""
        return {
            "title": self.title,
            "url": self.url,
            "time_added": self.time_added,
            "tags": self.tags,
            "status": self.status,
        }


@dataclass(frozen=True)
class ParsedTable:
    """
    Outcome of reading a source file.

    Exactly one of records or error is populated.
    """

    records: Tuple[BookmarkRecord, ...] = ()
    error: Optional[str] = None

    def __post_init__(self):
        if self.error is not None and self.records:
            raise ValueError("ParsedTable cannot carry both records and an error")
        if self.error is None and not self.records:
            raise ValueError("ParsedTable needs either records or an error")
        # Accept any sequence but store a tuple
        object.__setattr__(self, "records", tuple(self.records))

    @classmethod
    def from_records(cls, records: Iterable[BookmarkRecord]) -> "ParsedTable":
        return cls(records=tuple(records))

    @classmethod
    def from_error(cls, message: str) -> "ParsedTable":
        return cls(error=message or "Invalid CSV format")

    @property
    def is_valid(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.records)


class Credentials:
    """
    Feedbin account credentials held in memory for one session.

    The secret is wrapped in a SecretStr so it never shows up in
    reprs, tracebacks or log records.
    """

    __slots__ = ("identity", "_secret")

    def __init__(self, identity: str, secret: str):
        self.identity = identity
        self._secret = SecretStr(secret)

    @property
    def secret(self) -> SecretStr:
        return self._secret

    def basic_auth(self) -> HTTPBasicAuth:
        """Build the transport-level Basic auth for identity:secret."""
        return HTTPBasicAuth(self.identity, self._secret.get_secret_value())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Credentials):
            return NotImplemented
        return (
            self.identity == other.identity
            and self._secret.get_secret_value() == other._secret.get_secret_value()
        )

    def __hash__(self) -> int:
        return hash(self.identity)

    def __repr__(self) -> str:
        return f"Credentials(identity={self.identity!r}, secret='**********')"


class ImportPhase(str, Enum):
    """Phases of an import run."""

    IDLE = "idle"
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"


class ItemState(str, Enum):
    """Per-row state shown next to each bookmark."""

    PENDING = "pending"
    PROCESSING = "processing"
    IMPORTED = "imported"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportStatus:
    """Immutable snapshot of import progress."""

    phase: ImportPhase = ImportPhase.IDLE
    cursor: int = 0
    total: int = 0
    succeeded: Tuple[BookmarkRecord, ...] = ()
    last_error: Optional[str] = None
    warnings: Tuple[Tuple[int, str], ...] = field(default_factory=tuple)

    @property
    def progress_percent(self) -> int:
        """Completion percentage based on the cursor."""
        if self.total <= 0:
            return 0
        return round(self.cursor / self.total * 100)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def is_active(self) -> bool:
        return self.phase == ImportPhase.IMPORTING

    def item_state(self, index: int) -> ItemState:
        """
        Derive the display state of the row at index.

        Successes always form a prefix of the batch, so any index below
        the success count has been imported.
        """
        if index < len(self.succeeded):
            return ItemState.IMPORTED
        if index == self.cursor:
            if self.phase == ImportPhase.IMPORTING:
                return ItemState.PROCESSING
            if self.phase == ImportPhase.FAILED:
                return ItemState.FAILED
        return ItemState.PENDING

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "phase": self.phase.value,
            "cursor": self.cursor,
            "total": self.total,
            "succeeded": [r.to_dict() for r in self.succeeded],
            "last_error": self.last_error,
            "warnings": [list(w) for w in self.warnings],
            "progress_percent": self.progress_percent,
        }


@dataclass(frozen=True)
class SubmitOutcome:
    """Result of submitting one bookmark to Feedbin."""

    entry_id: int
    marked_read: bool = False
    warning: Optional[str] = None
