from __future__ import annotations

import contextlib
import json
from itertools import count
from pathlib import Path
from typing import List

import pytest

from src import orchestrator
from src.infrastructure.memory_store import InMemoryStoreClient, fail_puts_for
from src.infrastructure.store import StoreError, StoreKey
from src.orchestrator import RunConfig, random_order, run_benchmark, run_layout
from src.reporter import ListReportSink
from src.strategies.embedded_list import EmbeddedListLayout
from src.strategies.flat_indexed import FlatIndexedLayout
from src.strategies.grouped import GroupedLayout
from src.utils.profiler import ProfileStats

TICK_SECONDS = 0.25


def _ticking_clock(step: float = TICK_SECONDS):
    """Clock advancing by `step` seconds per call."""
    ticks = count()
    return lambda: next(ticks) * step


class _RecordingLayout:
    """Layout double recording the order of reads."""

    name = "recording"
    label = "Recording"
    kind = "Recording"
    subject_label = "key"

    def __init__(self, records_per_user: int) -> None:
        self.records_per_user = records_per_user
        self.writes: List[int] = []
        self.reads: List[int] = []

    def write(self, user_index: int) -> List[StoreError]:
        self.writes.append(user_index)
        return []

    def read(self, user_index: int) -> int:
        self.reads.append(user_index)
        return self.records_per_user

    def subject(self, user_index: int) -> str:
        return f"user-{user_index}"


@pytest.mark.parametrize("num_users", [0, 1, 2, 10, 100])
def test_random_order_is_a_permutation(num_users: int) -> None:
    order = random_order(num_users, seed=7)
    assert sorted(order) == list(range(num_users))


def test_random_order_is_reproducible_with_a_seed() -> None:
    assert random_order(50, seed=123) == random_order(50, seed=123)
    assert random_order(50, seed=123) != random_order(50, seed=124)


def test_run_config_resolves_defaults_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("BENCHMARK_SEED", "99")

    resolved = RunConfig().resolved()

    assert resolved.layout_names == orchestrator.available_layouts()
    assert resolved.num_users == 10
    assert resolved.records_per_user == 10
    assert resolved.do_write is True
    assert resolved.seed == 99


def test_run_config_rejects_negative_sizes() -> None:
    with pytest.raises(ValueError):
        RunConfig(num_users=-1).resolved()


def test_run_layout_reads_every_user_once_in_the_given_order(small_config: RunConfig) -> None:
    layout = _RecordingLayout(records_per_user=3)

    result = run_layout(layout, small_config, order=[1, 0])

    assert layout.writes == [0, 1]
    assert layout.reads == [1, 0]
    assert result["read_order"] == [1, 0]
    assert result["verification_failures"] == 0


def test_run_layout_average_latency_is_duration_over_users(small_config: RunConfig) -> None:
    # start=0.0, end=0.25 on the ticking clock
    result = run_layout(
        _RecordingLayout(3), small_config, order=[0, 1], clock=_ticking_clock()
    )

    assert result["read_duration_seconds"] == pytest.approx(TICK_SECONDS)
    assert result["avg_read_latency_seconds"] == pytest.approx(TICK_SECONDS / 2)
    assert result["avg_read_latency_ms"] == pytest.approx(TICK_SECONDS / 2 * 1000)
    assert result["events"][-1] == {
        "type": "timing",
        "message": "Recording Read Time: 125.000ms",
    }


def test_run_layout_with_zero_users_reports_zero_latency() -> None:
    result = run_layout(_RecordingLayout(3), RunConfig(num_users=0, seed=1), order=[])

    assert result["avg_read_latency_seconds"] == 0.0
    assert result["records_read"] == 0


def test_run_layout_skips_writes_when_disabled(memory_store: InMemoryStoreClient) -> None:
    layout = GroupedLayout(memory_store, 3)
    config = RunConfig(num_users=2, records_per_user=3, do_write=False, seed=1)

    result = run_layout(layout, config, order=[0, 1])

    assert len(memory_store) == 0
    assert result["verification_failures"] == 2
    assert [e["message"] for e in result["events"][:2]] == [
        "Error reading all entities for key /UserPracticeTestParent,ParentKey0000",
        "Error reading all entities for key /UserPracticeTestParent,ParentKey0001",
    ]


def test_flat_indexed_end_to_end_two_users_three_records(memory_store: InMemoryStoreClient) -> None:
    config = RunConfig(
        layout_names=["flat_indexed"], num_users=2, records_per_user=3, do_write=True, seed=5
    )

    results = run_benchmark(memory_store, config)

    layout = FlatIndexedLayout(memory_store, 3)
    matches = layout.fetch_by_owner("kaid_0000")
    assert len(matches) == 3
    assert {m["kaid"] for m in matches} == {"kaid_0000"}
    assert layout.fetch_by_owner("kaid_9999") == []
    assert results[0]["records_read"] == 6
    assert results[0]["verification_failures"] == 0


def test_embedded_list_with_zero_records_has_no_verification_failure(
    memory_store: InMemoryStoreClient,
) -> None:
    sink = ListReportSink()
    config = RunConfig(
        layout_names=["embedded_list"], num_users=3, records_per_user=0, do_write=True, seed=5
    )

    results = run_benchmark(memory_store, config, sink=sink)

    assert results[0]["records_read"] == 0
    assert results[0]["verification_failures"] == 0
    assert not any(line.startswith("Error reading") for line in sink.lines)
    assert sink.ok is True


def test_failed_put_does_not_abort_remaining_writes() -> None:
    failing_key = EmbeddedListLayout(InMemoryStoreClient(), 2).key_for(0)
    store = InMemoryStoreClient(fail_on=fail_puts_for([failing_key]))
    sink = ListReportSink()
    config = RunConfig(
        layout_names=["embedded_list"], num_users=4, records_per_user=2, do_write=True, seed=3
    )

    results = run_benchmark(store, config, sink=sink)

    assert store.operation_counts[("Put", "UserPracticeTestRepeated")] == 4
    assert len(store.keys("UserPracticeTestRepeated")) == 3
    result = results[0]
    assert result["write_errors"] == 1
    # The missing entity surfaces again on read as a NotFound plus a count mismatch.
    assert result["read_errors"] == 1
    assert result["verification_failures"] == 1
    assert sink.lines[0] == (
        "Could not Put UserPracticeTestRepeated to datastore: injected failure"
    )
    assert sink.ok is False


def test_read_errors_are_reported_and_the_loop_continues() -> None:
    queries: list[StoreKey | str] = []

    def fail_first_query(operation: str, target: StoreKey | str) -> bool:
        if operation != "Query":
            return False
        queries.append(target)
        return len(queries) == 1

    store = InMemoryStoreClient(fail_on=fail_first_query)
    config = RunConfig(layout_names=["grouped"], num_users=3, records_per_user=2, seed=11)

    result = run_benchmark(store, config)[0]

    assert len(queries) == 3
    assert result["read_errors"] == 1
    assert result["records_read"] == 4
    store_errors = [e for e in result["events"] if e["type"] == "store_error"]
    assert store_errors[0]["message"] == (
        "Could not Query UserPracticeTestGroup to datastore: injected failure"
    )


def test_run_benchmark_runs_all_layouts_in_fixed_order(memory_store: InMemoryStoreClient) -> None:
    sink = ListReportSink()

    results = run_benchmark(
        memory_store, RunConfig(num_users=2, records_per_user=3, seed=1), sink=sink
    )

    assert [r["layout"] for r in results] == [
        "embedded_list",
        "grouped",
        "grouped_indexed",
        "flat_indexed",
    ]
    assert [line.split(" Read Time:")[0] for line in sink.lines] == [
        "Repeated Structured Properties",
        "Entity Group",
        "Entity (Indexed Group)",
        "Entity (Indexed)",
    ]
    assert all(r["avg_read_latency_seconds"] >= 0 for r in results)
    assert len({tuple(r["read_order"]) for r in results}) == 1
    assert sink.ok is True


def test_run_benchmark_rejects_unknown_layout(memory_store: InMemoryStoreClient) -> None:
    with pytest.raises(ValueError, match="Unknown layout 'nope'"):
        run_benchmark(memory_store, RunConfig(layout_names=["nope"], num_users=1, seed=1))


def test_run_benchmark_persists_results(memory_store: InMemoryStoreClient, tmp_path: Path) -> None:
    config = RunConfig(
        layout_names=["grouped"],
        num_users=1,
        records_per_user=1,
        seed=1,
        persist=True,
        results_dir=tmp_path,
    )

    run_benchmark(memory_store, config)

    payload = json.loads((tmp_path / "latest.json").read_text(encoding="utf-8"))
    assert payload["layouts"] == ["grouped"]
    assert payload["results"][0]["records_read"] == 1
    assert len(list(tmp_path.glob("run-*.json"))) == 1


def test_write_layouts_only_writes(memory_store: InMemoryStoreClient) -> None:
    failures = orchestrator.write_layouts(
        memory_store,
        RunConfig(layout_names=["grouped", "flat_indexed"], num_users=2, records_per_user=2),
    )

    assert failures == {"grouped": 0, "flat_indexed": 0}
    assert len(memory_store) == 8
    assert all(op == "Put" for op, _ in memory_store.operation_counts)


def test_idle_cpu_reading_is_kept_as_zero(monkeypatch, small_config: RunConfig) -> None:
    @contextlib.contextmanager
    def idle_profile(label: str):
        stats = ProfileStats(label=label)
        yield stats
        stats.cpu_percent = 0.0

    monkeypatch.setattr(orchestrator, "profile_block", idle_profile)

    result = run_layout(_RecordingLayout(3), small_config, order=[0, 1])

    assert result["cpu_percent"] == 0.0
