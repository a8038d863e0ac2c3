"""
Sequential import driver.

Pushes bookmarks to Feedbin strictly in input order, one request at a
time, writing progress into an ImportStatusModel. The first failing item
ends the run; items before it stay recorded as imported.
"""

import logging
import threading
from typing import Protocol, Sequence

from .data_models import BookmarkRecord, Credentials, ImportStatus, SubmitOutcome
from .import_status import ImportStatusModel
from ..utils.error_handler import (
    ImportInProgressError,
    InvalidTransitionError,
    SubmitError,
)
from ..utils.secure_logging import secure_logger

CANCELLED_MESSAGE = "Import cancelled"


class Submitter(Protocol):
    def submit_one(self, credentials: Credentials, record: BookmarkRecord) -> SubmitOutcome:
        ...


class ImportDriver:
    """Runs one batch at a time against a single submitter."""

    def __init__(
        self,
        submitter: Submitter,
        status: ImportStatusModel,
        inter_item_delay: float = 0.5,
    ):
        """
        Initialize the driver.

        Args:
            submitter: Object performing the remote calls for one item
            status: Status model the driver writes to
            inter_item_delay: Seconds to pause after each successful item
        """
        self.submitter = submitter
        self.status = status
        self.inter_item_delay = inter_item_delay
        self.logger = logging.getLogger(__name__)

        self._cancel_event = threading.Event()
        self._run_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def cancel(self) -> None:
        """
        Ask the active run, or one about to take the run lock, to stop
        before its next submission.

        A request already in flight is allowed to finish. The request is
        cleared when that run ends or by clear_cancel().
        """
        if self.is_running:
            self.logger.info("Cancellation requested")
        self._cancel_event.set()

    def clear_cancel(self) -> None:
        """Drop a cancel request left over from before a new start."""
        self._cancel_event.clear()

    def run(self, records: Sequence[BookmarkRecord], credentials: Credentials) -> ImportStatus:
        """
        Import a batch from index 0.

        A new run never skips items a previous run already imported.

        Args:
            records: Bookmarks in the order they must be submitted
            credentials: Feedbin credentials (checked by the caller)

        Returns:
            Final status snapshot (Completed or Failed)

        Raises:
            ImportInProgressError: If another run is active
        """
        if not self._run_lock.acquire(blocking=False):
            raise ImportInProgressError("An import is already running")

        try:
            return self._run(list(records), credentials)
        except InvalidTransitionError:
            # Status was reset underneath a cancelled run
            if not self._cancel_event.is_set():
                raise
            self.logger.info("Import stopped after reset")
            return self.status.snapshot()
        finally:
            self._cancel_event.clear()
            self._run_lock.release()

    def _run(self, records: Sequence[BookmarkRecord], credentials: Credentials) -> ImportStatus:
        total = len(records)
        self.status.begin(total)
        self.logger.info(f"Starting import of {total} bookmarks")

        for index, record in enumerate(records):
            if self._cancel_event.is_set():
                return self._stop(index, CANCELLED_MESSAGE)

            # Observers see "processing index" while the request is in flight
            self.status.advance(index)

            try:
                outcome = self.submitter.submit_one(credentials, record)
            except SubmitError as e:
                return self._stop(index, str(e))
            except Exception as e:
                self.logger.exception(f"Unexpected error importing item {index}")
                return self._stop(index, str(e) or type(e).__name__)

            self.status.record_success(record, outcome.warning)
            self.logger.debug(f"Imported item {index + 1}/{total}")

            if index < total - 1 and self._pause():
                return self._stop(index + 1, CANCELLED_MESSAGE)

        self.status.complete()
        self.logger.info(f"Import completed: {total} bookmarks")
        return self.status.snapshot()

    def _pause(self) -> bool:
        """Sleep between items. Returns True if cancelled meanwhile."""
        if self.inter_item_delay <= 0:
            return self._cancel_event.is_set()
        return self._cancel_event.wait(self.inter_item_delay)

    def _stop(self, index: int, message: str) -> ImportStatus:
        secure_logger.warning(f"Import stopped at item {index}: {message}")
        self.status.fail(index, message)
        return self.status.snapshot()
