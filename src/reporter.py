"""
Report sinks and result rendering for the Datastore Layout Benchmark.

The runner produces structured `LayoutResult`s; everything here is a thin
projection of those results into human-readable lines (for the HTTP response
or a terminal stream) or a rich table (for the CLI).
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Mapping, Optional, Protocol, TextIO, runtime_checkable

from rich import box
from rich.console import Console
from rich.table import Table


@runtime_checkable
class ReportSink(Protocol):
    """
    Write-only, line-oriented report output.

    Lines are delivered in emission order; `complete` is called once at the end.
    """

    def line(self, text: str) -> None:
        ...

    def complete(self, ok: bool) -> None:
        ...


class ListReportSink:
    """Collects lines in memory (HTTP responses, tests)."""

    def __init__(self) -> None:
        self.lines: List[str] = []
        self.ok: Optional[bool] = None

    def line(self, text: str) -> None:
        self.lines.append(text)

    def complete(self, ok: bool) -> None:
        self.ok = ok

    @property
    def completed(self) -> bool:
        return self.ok is not None

    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)


class StreamReportSink:
    """Writes each line to a text stream as soon as it is emitted."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream or sys.stdout
        self.ok: Optional[bool] = None

    def line(self, text: str) -> None:
        self._stream.write(f"{text}\n")
        self._stream.flush()

    def complete(self, ok: bool) -> None:
        self.ok = ok


def project_lines(result: Mapping[str, Any]) -> List[str]:
    """Report lines of one layout result, in the order its events occurred."""
    return [event["message"] for event in result.get("events", [])]


def print_results(results: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """
    Render benchmark results as a rich table.

    Rows keep benchmark order so the four layouts read top to bottom the same
    way in every run.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    first = results[0]
    title = (
        "Datastore Layout Benchmark Results\n"
        f"[dim]users={first.get('num_users', 0)} "
        f"records/user={first.get('records_per_user', 0)} "
        f"seed={first.get('seed', 'n/a')}[/dim]"
    )
    table = Table(title=title, box=box.ROUNDED, caption="Average read latency per user")

    table.add_column("Layout", style="cyan", no_wrap=True)
    table.add_column("Kind", style="dim")
    table.add_column("Records Read", justify="right", style="magenta")
    table.add_column("Avg Read (ms)", justify="right", style="bold green")
    table.add_column("Store Errors", justify="right", style="red")
    table.add_column("Verification Failures", justify="right", style="yellow")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")

    for res in results:
        store_errors = res.get("write_errors", 0) + res.get("read_errors", 0)
        mem_bytes = res.get("peak_rss_bytes") or 0
        table.add_row(
            res.get("label", res.get("layout", "Unknown")),
            res.get("kind", ""),
            f"{res.get('records_read', 0):,}",
            f"{res.get('avg_read_latency_ms', 0.0):.3f}",
            str(store_errors),
            str(res.get("verification_failures", 0)),
            f"{mem_bytes / (1024 * 1024):.2f}",
        )

    console.print(table)


__all__ = [
    "ListReportSink",
    "ReportSink",
    "StreamReportSink",
    "print_results",
    "project_lines",
]
