"""
Progress tracking for import runs.

Turns status-model notifications into a tqdm progress bar and keeps a
few timing figures for the final summary.
"""

import logging
import time
from typing import Optional

from tqdm import tqdm

from ..core.data_models import ImportPhase, ImportStatus


class ImportProgressTracker:
    """Status observer that drives a tqdm bar."""

    def __init__(self, show_progress_bar: bool = True, description: str = "Importing to Feedbin"):
        """
        Initialize progress tracker.

        Args:
            show_progress_bar: Whether to draw the bar
            description: Label shown left of the bar
        """
        self.show_progress_bar = show_progress_bar
        self.description = description
        self.logger = logging.getLogger(__name__)

        self.pbar: Optional[tqdm] = None
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self._shown = 0

    def __call__(self, status: ImportStatus) -> None:
        if status.phase == ImportPhase.IMPORTING:
            if self.pbar is None and self.start_time is None:
                self._start(status.total)
            self._update(status.succeeded_count)
        elif status.phase in (ImportPhase.COMPLETED, ImportPhase.FAILED):
            self._update(status.succeeded_count)
            self._finish(status)

    def _start(self, total: int) -> None:
        self.start_time = time.time()
        self._shown = 0
        if self.show_progress_bar:
            self.pbar = tqdm(total=total, desc=self.description, unit="bookmark")

    def _update(self, done: int) -> None:
        if self.pbar is not None and done > self._shown:
            self.pbar.update(done - self._shown)
        self._shown = max(self._shown, done)

    def _finish(self, status: ImportStatus) -> None:
        if self.end_time is not None:
            return
        self.end_time = time.time()
        if self.pbar is not None:
            if status.phase == ImportPhase.FAILED:
                self.pbar.set_postfix_str(f"stopped at item {status.cursor + 1}")
            self.pbar.close()
        self.logger.info(
            f"Run finished ({status.phase.value}) in {self.elapsed:.1f}s, "
            f"{status.succeeded_count}/{status.total} imported"
        )

    @property
    def elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        return (self.end_time or time.time()) - self.start_time

    @property
    def items_per_second(self) -> float:
        elapsed = self.elapsed
        if elapsed > 0:
            return self._shown / elapsed
        return 0.0
