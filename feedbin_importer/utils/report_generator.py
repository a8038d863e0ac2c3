"""
Terminal reports for the Feedbin Importer.

Renders the loaded bookmark list and the import result with Rich.
"""

import json
from typing import Any, Dict, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..core.data_models import BookmarkRecord, ImportPhase, ImportStatus, ItemState

STATE_STYLES = {
    ItemState.PENDING: ("", "-"),
    ItemState.PROCESSING: ("yellow", "importing"),
    ItemState.IMPORTED: ("green", "imported"),
    ItemState.FAILED: ("red", "failed"),
}


class ReportGenerator:
    """Builds Rich renderables for bookmark lists and run summaries."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def bookmark_table(
        self,
        records: Sequence[BookmarkRecord],
        status: Optional[ImportStatus] = None,
        limit: Optional[int] = None,
    ) -> Table:
        """
        Table of bookmarks with their Feedbin state.

        Args:
            records: Loaded bookmarks
            status: Current import status (rows show '-' without one)
            limit: Show at most this many rows
        """
        table = Table(title=f"{len(records)} Bookmarks Loaded", show_lines=False)
        for header in ("#", "Title", "URL", "Date Added", "Tags", "Status", "Feedbin"):
            table.add_column(header, overflow="fold")

        shown = records if limit is None else records[:limit]
        for index, record in enumerate(shown):
            state = status.item_state(index) if status else ItemState.PENDING
            style, label = STATE_STYLES[state]
            table.add_row(
                str(index + 1),
                escape(record.title) or "(untitled)",
                escape(record.url),
                escape(record.format_time_added()),
                escape(", ".join(record.tag_list())),
                escape(record.status),
                f"[{style}]{label}[/{style}]" if style else label,
            )

        if limit is not None and len(records) > limit:
            table.caption = f"... and {len(records) - limit} more"

        return table

    def status_panel(self, status: ImportStatus) -> Panel:
        """Summary panel for a finished or running import."""
        if status.phase == ImportPhase.COMPLETED:
            title, style = "Import Completed", "green"
            body = f"Imported {status.succeeded_count} of {status.total} bookmarks."
        elif status.phase == ImportPhase.FAILED:
            title, style = "Import Error", "red"
            body = (
                f"Imported {status.succeeded_count} of {status.total} bookmarks.\n"
                f"Stopped at item {status.cursor + 1}: {escape(status.last_error or '')}"
            )
        elif status.phase == ImportPhase.IMPORTING:
            title, style = "Importing to Feedbin...", "blue"
            body = (
                f"Processing item {status.cursor + 1} of {status.total} "
                f"({status.progress_percent}%)"
            )
        else:
            title, style = "Idle", "white"
            body = "No import has been started."

        for index, warning in status.warnings:
            body += f"\nWarning (item {index + 1}): {escape(warning)}"

        return Panel(body, title=title, border_style=style)

    def print_bookmarks(self, records: Sequence[BookmarkRecord], **kwargs: Any) -> None:
        self.console.print(self.bookmark_table(records, **kwargs))

    def print_status(self, status: ImportStatus) -> None:
        self.console.print(self.status_panel(status))

    def print_error(self, message: str, hint: str = "") -> None:
        body = escape(message) if not hint else f"{escape(message)}\n\n{escape(hint)}"
        self.console.print(Panel(body, title="Error", border_style="red"))

    @staticmethod
    def status_json(status: ImportStatus) -> str:
        """Machine-readable form of the status."""
        data: Dict[str, Any] = status.to_dict()
        return json.dumps(data, indent=2)
