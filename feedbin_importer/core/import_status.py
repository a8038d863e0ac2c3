"""
Import status model.

Mutable record of import progress with guarded transitions. The driver
is the only writer; presentation code reads snapshots or subscribes to
change notifications, possibly from another thread.
"""

import logging
import threading
from typing import Callable, List, Optional

from .data_models import BookmarkRecord, ImportPhase, ImportStatus
from ..utils.error_handler import InvalidTransitionError

StatusObserver = Callable[[ImportStatus], None]


class ImportStatusModel:
    """Finite state machine Idle -> Importing -> Completed | Failed."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._observers: List[StatusObserver] = []
        self._clear()

    def _clear(self) -> None:
        self._phase = ImportPhase.IDLE
        self._cursor = 0
        self._total = 0
        self._succeeded: List[BookmarkRecord] = []
        self._last_error: Optional[str] = None
        self._warnings: List[tuple] = []

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def snapshot(self) -> ImportStatus:
        """Return an immutable copy of the current status."""
        with self._lock:
            return ImportStatus(
                phase=self._phase,
                cursor=self._cursor,
                total=self._total,
                succeeded=tuple(self._succeeded),
                last_error=self._last_error,
                warnings=tuple(self._warnings),
            )

    @property
    def phase(self) -> ImportPhase:
        return self._phase

    def subscribe(self, observer: StatusObserver) -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unsubscribe(self, observer: StatusObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def _notify(self) -> None:
        status = self.snapshot()
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(status)
            except Exception:
                self.logger.exception("Status observer failed")

    def _require(self, *phases: ImportPhase) -> None:
        if self._phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise InvalidTransitionError(
                f"Cannot transition from {self._phase.value} (expected {allowed})"
            )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def begin(self, total: int) -> None:
        """Start a new batch. Legal from Idle, Completed and Failed."""
        with self._lock:
            self._require(ImportPhase.IDLE, ImportPhase.COMPLETED, ImportPhase.FAILED)
            self._clear()
            self._phase = ImportPhase.IMPORTING
            self._total = total
        self._notify()

    def advance(self, index: int) -> None:
        """Point the cursor at the item about to be submitted."""
        with self._lock:
            self._require(ImportPhase.IMPORTING)
            if not 0 <= index < self._total:
                raise InvalidTransitionError(
                    f"Cursor {index} out of range for {self._total} items"
                )
            if index < len(self._succeeded):
                raise InvalidTransitionError(
                    f"Cursor {index} is behind {len(self._succeeded)} succeeded items"
                )
            self._cursor = index
        self._notify()

    def record_success(self, record: BookmarkRecord, warning: Optional[str] = None) -> None:
        """Append the item under the cursor to the succeeded list."""
        with self._lock:
            self._require(ImportPhase.IMPORTING)
            if len(self._succeeded) != self._cursor:
                raise InvalidTransitionError(
                    f"Success recorded for item {len(self._succeeded)} "
                    f"but cursor is at {self._cursor}"
                )
            self._succeeded.append(record)
            if warning:
                self._warnings.append((self._cursor, warning))
        self._notify()

    def complete(self) -> None:
        """Finish a batch in which every item succeeded."""
        with self._lock:
            self._require(ImportPhase.IMPORTING)
            if len(self._succeeded) != self._total:
                raise InvalidTransitionError(
                    f"Only {len(self._succeeded)} of {self._total} items succeeded"
                )
            self._phase = ImportPhase.COMPLETED
            self._cursor = self._total
        self._notify()

    def fail(self, index: int, message: str) -> None:
        """Stop the batch at the first failing item."""
        with self._lock:
            self._require(ImportPhase.IMPORTING)
            self._phase = ImportPhase.FAILED
            self._cursor = index
            self._last_error = message or "Unknown error"
        self._notify()

    def reset(self) -> None:
        """Discard all progress and return to Idle. No-op when already Idle."""
        with self._lock:
            if self._phase == ImportPhase.IDLE:
                return
            self._clear()
        self._notify()
