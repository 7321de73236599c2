"""
Result aggregation and reporting for sync operations.

Package workers hand their TransferReport to a single aggregator thread
through a queue. The aggregator owns all counters and prints nothing until
the queue is closed, then renders the report table and the run summary.
"""

import logging
import queue
import threading
from typing import Callable, List, Optional

import click

from ..models.results import MigrationSummary, TransferReport, TransferStatus
from ..utils.constants import MAX_ERROR_COLUMN_WIDTH, REPORT_TABLE_HEADER, SEPARATOR_WIDTH
from ..utils.logging_utils import format_count_with_unit

# Marks the end of the report stream
_SENTINEL = object()

STATUS_COLORS = {
    TransferStatus.SUCCESS: "green",
    TransferStatus.PARTIAL_SUCCESS: "yellow",
    TransferStatus.FAILED: "red",
}


def _truncate(text: str, width: int = MAX_ERROR_COLUMN_WIDTH) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def render_table(reports: List[TransferReport], color: bool = True) -> List[str]:
    """
    Render reports as a plain text table.

    Args:
        reports: Package reports in display order
        color: Color the status column

    Returns:
        Table lines, header first
    """
    rows = [
        [
            r.package_name,
            r.package_type,
            r.status.value,
            str(r.versions_count),
            _truncate(r.error_message) if r.status != TransferStatus.SUCCESS else "",
        ]
        for r in reports
    ]
    widths = [max(len(row[i]) for row in [REPORT_TABLE_HEADER] + rows) for i in range(len(REPORT_TABLE_HEADER))]

    def _line(cells: List[str], status: Optional[TransferStatus] = None) -> str:
        padded = [cell.ljust(widths[i]) for i, cell in enumerate(cells)]
        if color and status is not None:
            padded[2] = click.style(padded[2], fg=STATUS_COLORS[status])
        return " | ".join(padded).rstrip()

    lines = [_line(REPORT_TABLE_HEADER), "-+-".join("-" * w for w in widths)]
    lines.extend(_line(row, report.status) for row, report in zip(rows, reports))
    return lines


def render_summary(summary: MigrationSummary) -> List[str]:
    """Render the aggregate counts printed after the table."""
    return [
        "Migration Summary:",
        f"- Successful: {summary.successful}",
        f"- Partial Success: {summary.partial}",
        f"- Failed: {summary.failed}",
    ]


class ResultAggregator:
    """Single consumer of package reports."""

    def __init__(self, echo: Callable[[str], None] = click.echo, color: bool = True) -> None:
        """
        Initialize the aggregator.

        Args:
            echo: Output function for the rendered report
            color: Color the status column
        """
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._summary = MigrationSummary()
        self._echo = echo
        self._color = color
        self._thread = threading.Thread(target=self._consume, name="result-aggregator", daemon=True)
        self._closed = False

    def start(self) -> None:
        """Start the consumer thread."""
        self._thread.start()

    def submit(self, report: TransferReport) -> None:
        """Hand over a package report; safe to call from any worker."""
        if self._closed:
            raise RuntimeError("Cannot submit reports after the aggregator was closed")
        self._queue.put(report)

    def close(self) -> None:
        """Signal that no more reports will be submitted."""
        if not self._closed:
            self._closed = True
            self._queue.put(_SENTINEL)

    def join(self, timeout: Optional[float] = None) -> MigrationSummary:
        """
        Wait for the consumer to drain the queue and print the report.

        Returns:
            Summary of all reports received
        """
        self._thread.join(timeout)
        return self._summary

    def _record(self, report: TransferReport) -> None:
        self._summary.reports.append(report)
        if report.status == TransferStatus.SUCCESS:
            self._summary.successful += 1
        elif report.status == TransferStatus.PARTIAL_SUCCESS:
            self._summary.partial += 1
        else:
            self._summary.failed += 1
        logging.debug("Received report for %s: %s", report.package_name, report.status.value)

    def _consume(self) -> None:
        while True:
            item = self._queue.get()
            if item is _SENTINEL:
                break
            self._record(item)  # type: ignore[arg-type]

        self._render()

    def _render(self) -> None:
        summary = self._summary
        if summary.reports:
            for line in render_table(summary.reports, color=self._color):
                self._echo(line)
        else:
            self._echo("No packages were migrated")

        self._echo("=" * SEPARATOR_WIDTH)
        for line in render_summary(summary):
            self._echo(line)
        logging.info(
            "Migration finished: %s processed",
            format_count_with_unit(summary.total, "package"),
        )


__all__ = ["ResultAggregator", "render_table", "render_summary", "STATUS_COLORS"]
