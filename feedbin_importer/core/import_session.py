"""
Import session.

The surface presentation code talks to: status queries, starting and
resetting an import, and answering the credential prompt. One session
owns one CredentialGate, one ImportStatusModel and one ImportDriver.
"""

import logging
import threading
from typing import List, Optional, Sequence

from .credential_gate import CredentialGate
from .data_models import BookmarkRecord, Credentials, ImportStatus, ItemState
from .feedbin_client import FeedbinClient, MarkReadFailurePolicy
from .import_driver import ImportDriver, Submitter
from .import_status import ImportStatusModel, StatusObserver
from ..config.configuration import Configuration
from ..utils.error_handler import ImportInProgressError


class ImportSession:
    """Ties credentials, status and the driver together."""

    def __init__(
        self,
        submitter: Submitter,
        inter_item_delay: float = 0.5,
        gate: Optional[CredentialGate] = None,
        status: Optional[ImportStatusModel] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.submitter = submitter
        self.gate = gate or CredentialGate()
        self.status_model = status or ImportStatusModel()
        self.driver = ImportDriver(submitter, self.status_model, inter_item_delay)

        self._background = False
        self._worker: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, config: Configuration) -> "ImportSession":
        """Build a session with a FeedbinClient configured from settings."""
        client = FeedbinClient(
            base_url=config.base_url,
            timeout=config.timeout,
            user_agent=config.user_agent,
            archive_statuses=config.archive_statuses,
            mark_read_failure=MarkReadFailurePolicy(config.mark_read_failure),
        )
        return cls(client, inter_item_delay=config.inter_item_delay)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def status(self) -> ImportStatus:
        return self.status_model.snapshot()

    @property
    def credentials_prompt_pending(self) -> bool:
        return self.gate.prompt_visible

    @property
    def is_importing(self) -> bool:
        worker = self._worker
        return self.driver.is_running or (worker is not None and worker.is_alive())

    def item_states(self, records: Sequence[BookmarkRecord]) -> List[ItemState]:
        """Display state for every row of the loaded batch."""
        status = self.status
        return [status.item_state(i) for i in range(len(records))]

    def subscribe(self, observer: StatusObserver) -> None:
        self.status_model.subscribe(observer)

    def unsubscribe(self, observer: StatusObserver) -> None:
        self.status_model.unsubscribe(observer)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_import(self, records: Sequence[BookmarkRecord], background: bool = False) -> bool:
        """
        Begin a run over records, or park it behind the credential prompt.

        Args:
            records: Bookmarks in submission order
            background: Run the loop on a worker thread and return at once

        Returns:
            True if the run started, False if it waits for credentials
        """
        batch = tuple(records)
        self._background = background

        def proceed(credentials: Credentials) -> None:
            self._launch(batch, credentials)

        started = self.gate.ensure_authorized(proceed)
        if not started:
            self.logger.info(f"Import of {len(batch)} bookmarks waiting for credentials")
        return started

    def provide_credentials(self, identity: str, secret: str) -> bool:
        """
        Answer the credential prompt.

        Raises InvalidCredentialsError (prompt stays open) on bad input.
        When a start was waiting on the prompt it runs now.

        Returns:
            True if a parked import was started
        """
        self.gate.submit(identity, secret)
        pending = self.gate.take_pending()
        if pending is None:
            return False
        pending(self.gate.credentials)
        return True

    def dismiss_credentials_prompt(self) -> None:
        """Close the prompt without credentials; the parked start is dropped."""
        self.gate.dismiss()

    def cancel_import(self) -> None:
        self.driver.cancel()

    def reset_import(self) -> None:
        """Return status to Idle, discarding progress."""
        if self.is_importing:
            self.driver.cancel()
            self.wait()
        self.status_model.reset()

    def wait(self, timeout: Optional[float] = None) -> ImportStatus:
        """Block until a background run finishes."""
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)
        return self.status

    def _launch(self, records: Sequence[BookmarkRecord], credentials: Credentials) -> None:
        if self.is_importing:
            raise ImportInProgressError("An import is already running")

        # A cancel from here on applies to this run
        self.driver.clear_cancel()

        if not self._background:
            self.driver.run(records, credentials)
            return

        self._worker = threading.Thread(
            target=self.driver.run,
            args=(records, credentials),
            name="feedbin-import",
            daemon=True,
        )
        self._worker.start()

    def close(self) -> None:
        """Stop any run and release the submitter's resources."""
        self.driver.cancel()
        self.wait()
        close = getattr(self.submitter, "close", None)
        if callable(close):
            close()
