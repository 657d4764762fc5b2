from __future__ import annotations

import io

from rich.console import Console

from src.reporter import ListReportSink, ReportSink, StreamReportSink, print_results, project_lines

RESULT = {
    "layout": "grouped",
    "label": "Entity Group",
    "kind": "UserPracticeTestGroup",
    "num_users": 2,
    "records_per_user": 3,
    "seed": 7,
    "records_read": 5,
    "avg_read_latency_ms": 1.5,
    "write_errors": 1,
    "read_errors": 0,
    "verification_failures": 1,
    "peak_rss_bytes": 2 * 1024 * 1024,
    "events": [
        {"type": "store_error", "message": "Could not Put UserPracticeTestGroup to datastore: boom"},
        {"type": "verification_failure", "message": "Error reading all entities for key x"},
        {"type": "timing", "message": "Entity Group Read Time: 1.500ms"},
    ],
}


def test_project_lines_keeps_event_order() -> None:
    assert project_lines(RESULT) == [
        "Could not Put UserPracticeTestGroup to datastore: boom",
        "Error reading all entities for key x",
        "Entity Group Read Time: 1.500ms",
    ]


def test_project_lines_tolerates_missing_events() -> None:
    assert project_lines({}) == []


def test_list_sink_collects_lines_and_completion() -> None:
    sink = ListReportSink()
    assert isinstance(sink, ReportSink)
    assert not sink.completed

    sink.line("a")
    sink.line("b")
    sink.complete(False)

    assert sink.text() == "a\nb\n"
    assert sink.completed
    assert sink.ok is False


def test_stream_sink_writes_each_line() -> None:
    stream = io.StringIO()
    sink = StreamReportSink(stream)

    sink.line("Entity Group Read Time: 1.500ms")
    sink.complete(True)

    assert stream.getvalue() == "Entity Group Read Time: 1.500ms\n"
    assert sink.ok is True


def test_print_results_renders_a_row_per_layout() -> None:
    console = Console(record=True, width=200)

    print_results([RESULT], console=console)

    output = console.export_text()
    assert "Entity Group" in output
    assert "UserPracticeTestGroup" in output
    assert "1.500" in output
    assert "2.00" in output


def test_print_results_handles_empty_input() -> None:
    console = Console(record=True, width=120)
    print_results([], console=console)
    assert "No results to display." in console.export_text()
