"""
Orchestrator for running the layout benchmark, profiling execution, and persisting results.

Usage (example from CLI):
    from src.infrastructure.memory_store import InMemoryStoreClient
    from src.orchestrator import RunConfig, run_benchmark

    results = run_benchmark(InMemoryStoreClient(), RunConfig(num_users=2, records_per_user=3))
    print(results[0]["avg_read_latency_ms"])

Each layout runs in the fixed order of `available_layouts()`: write phase
(optional), then a timed read phase over one shared random permutation of
the users. Store errors and verification failures are recorded as events and
never abort the run.

When persisting, outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
import random
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from src.config import get_settings
from src.infrastructure.store import StoreClient, StoreError
from src.reporter import ReportSink, project_lines
from src.strategies.abstract import LayoutResult, LayoutStrategy, ReportEvent
from src.strategies.embedded_list import EmbeddedListLayout
from src.strategies.flat_indexed import FlatIndexedLayout
from src.strategies.grouped import GroupedLayout
from src.strategies.grouped_indexed import GroupedIndexedLayout
from src.utils.logging import get_logger
from src.utils.profiler import profile_block

log = get_logger(__name__)

Clock = Callable[[], float]
LayoutFactory = Callable[[StoreClient, int], LayoutStrategy]


@dataclass
class RunConfig:
    """
    Parameters of one benchmark run. `None` fields fall back to settings.

    `seed=None` seeds the read order from the wall clock, so runs are not
    reproducible unless a seed is given.
    """

    layout_names: Optional[Sequence[str]] = None
    num_users: Optional[int] = None
    records_per_user: Optional[int] = None
    do_write: Optional[bool] = None
    seed: Optional[int] = None
    persist: bool = False
    results_dir: Path | str = "results"

    def resolved(self) -> "RunConfig":
        """Copy with every optional field filled from settings or the clock."""
        settings = get_settings()
        names = list(self.layout_names) if self.layout_names is not None else ["all"]
        if "all" in names:
            names = available_layouts()
        seed = self.seed if self.seed is not None else settings.benchmark_seed
        resolved = replace(
            self,
            layout_names=names,
            num_users=self.num_users if self.num_users is not None else settings.benchmark_num_users,
            records_per_user=(
                self.records_per_user
                if self.records_per_user is not None
                else settings.benchmark_records_per_user
            ),
            do_write=self.do_write if self.do_write is not None else settings.benchmark_do_write,
            seed=seed if seed is not None else int(time.time()),
        )
        if resolved.num_users < 0 or resolved.records_per_user < 0:
            raise ValueError("num_users and records_per_user must be >= 0")
        return resolved


def _round_float(value: float, decimals: int = 3) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _layout_factories() -> Dict[str, LayoutFactory]:
    """Registry of available layouts, in benchmark order."""
    return {
        "embedded_list": lambda client, k: EmbeddedListLayout(client, k),
        "grouped": lambda client, k: GroupedLayout(client, k),
        "grouped_indexed": lambda client, k: GroupedIndexedLayout(client, k),
        "flat_indexed": lambda client, k: FlatIndexedLayout(client, k),
    }


def available_layouts() -> List[str]:
    """List available layout names in the order they are benchmarked."""
    return list(_layout_factories().keys())


def _resolve_layout(name: str, client: StoreClient, records_per_user: int) -> LayoutStrategy:
    factories = _layout_factories()
    if name not in factories:
        raise ValueError(f"Unknown layout '{name}'. Available: {', '.join(factories)}")
    return factories[name](client, records_per_user)


def random_order(num_users: int, seed: Optional[int] = None) -> List[int]:
    """
    Pseudo-random permutation of ``range(num_users)``.

    Without a seed the permutation is seeded from the current time.
    """
    rng = random.Random(seed if seed is not None else int(time.time()))
    return rng.sample(range(num_users), num_users)


def _store_error_event(exc: StoreError, user: int) -> ReportEvent:
    return ReportEvent(type="store_error", message=str(exc), user=user)


def run_layout(
    layout: LayoutStrategy,
    config: RunConfig,
    order: Sequence[int],
    clock: Clock = time.perf_counter,
) -> LayoutResult:
    """
    Run the write and timed read phase of one layout.

    Parameters
    ----------
    layout : LayoutStrategy
        Layout to benchmark.
    config : RunConfig
        Run parameters; unset fields fall back to settings.
    order : sequence[int]
        Visiting order of the users during the read phase.
    clock : callable
        Monotonic clock in seconds used to time the read phase.

    Returns
    -------
    LayoutResult
        Timing, counters and the ordered list of report events.
    """
    config = config.resolved()
    num_users = int(config.num_users or 0)
    expected = int(config.records_per_user or 0)
    events: List[ReportEvent] = []
    write_errors = read_errors = verification_failures = records_read = 0

    log.info(f"[LAYOUT START] {layout.name}", extra={"layout": layout.name, "kind": layout.kind})
    with profile_block(layout.name) as stats:
        if config.do_write:
            for user in range(num_users):
                for exc in layout.write(user):
                    write_errors += 1
                    events.append(_store_error_event(exc, user))
            log.info(
                f"[WRITE] {layout.name} complete",
                extra={"layout": layout.name, "users": num_users, "write_errors": write_errors},
            )

        start = clock()
        for user in order:
            try:
                count = layout.read(user)
            except StoreError as exc:
                log.warning(str(exc), extra={"layout": layout.name, "user": user})
                read_errors += 1
                events.append(_store_error_event(exc, user))
                count = 0
            records_read += count
            if count != expected:
                verification_failures += 1
                events.append(
                    ReportEvent(
                        type="verification_failure",
                        message=(
                            f"Error reading all entities for {layout.subject_label} "
                            f"{layout.subject(user)}"
                        ),
                        user=user,
                    )
                )
        end = clock()

    duration = max(end - start, 0.0)
    avg_seconds = duration / num_users if num_users else 0.0
    avg_ms = avg_seconds * 1000
    events.append(ReportEvent(type="timing", message=f"{layout.label} Read Time: {avg_ms:.3f}ms"))
    log.info(
        f"[READ] {layout.name} complete",
        extra={
            "layout": layout.name,
            "avg_read_latency_ms": _round_float(avg_ms),
            "read_errors": read_errors,
            "verification_failures": verification_failures,
        },
    )

    return LayoutResult(
        layout=layout.name,
        label=layout.label,
        kind=layout.kind,
        num_users=num_users,
        records_per_user=expected,
        do_write=bool(config.do_write),
        seed=int(config.seed or 0),
        read_order=list(order),
        read_duration_seconds=duration,
        avg_read_latency_seconds=avg_seconds,
        avg_read_latency_ms=avg_ms,
        records_read=records_read,
        write_errors=write_errors,
        read_errors=read_errors,
        verification_failures=verification_failures,
        events=events,
        peak_rss_bytes=stats.peak_rss_bytes,
        cpu_percent=_round_float(stats.cpu_percent, 1) if stats.cpu_percent is not None else None,
    )


def write_layouts(client: StoreClient, config: RunConfig) -> Dict[str, int]:
    """
    Run only the write phase of the configured layouts (pre-seeding).

    Returns the number of failed puts per layout.
    """
    config = config.resolved()
    failures: Dict[str, int] = {}
    for name in config.layout_names or []:
        layout = _resolve_layout(name, client, int(config.records_per_user or 0))
        failures[name] = sum(len(layout.write(user)) for user in range(int(config.num_users or 0)))
        log.info(
            f"[SEED] {name} complete",
            extra={"layout": name, "users": config.num_users, "write_errors": failures[name]},
        )
    return failures


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    with latest_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    with archive_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def has_store_errors(results: Sequence[LayoutResult]) -> bool:
    return any(r.get("write_errors", 0) or r.get("read_errors", 0) for r in results)


def run_benchmark(
    client: StoreClient,
    config: Optional[RunConfig] = None,
    sink: Optional[ReportSink] = None,
    clock: Clock = time.perf_counter,
) -> List[LayoutResult]:
    """
    Run every configured layout in order against `client`.

    Parameters
    ----------
    client : StoreClient
        Store used by all layouts; injected so tests can pass a double.
    config : RunConfig | None
        Run parameters; defaults come from settings.
    sink : ReportSink | None
        Receives the report lines of each layout as soon as it finishes, then
        the completion state (False when any store operation failed).
    clock : callable
        Clock used to time read phases.

    Returns
    -------
    list[LayoutResult]
        One result per layout, in benchmark order.
    """
    config = (config or RunConfig()).resolved()
    order = random_order(int(config.num_users or 0), config.seed)
    names = list(config.layout_names or [])

    results: List[LayoutResult] = []
    for name in names:
        layout = _resolve_layout(name, client, int(config.records_per_user or 0))
        result = run_layout(layout, config, order, clock=clock)
        results.append(result)
        if sink is not None:
            for line in project_lines(result):
                sink.line(line)
        log.info(f"[LAYOUT COMPLETE] {name}", extra={"layout": name})

    ok = not has_store_errors(results)
    if sink is not None:
        sink.complete(ok)

    if config.persist:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "num_users": config.num_users,
            "records_per_user": config.records_per_user,
            "seed": config.seed,
            "layouts": names,
            "results": results,
        }
        _persist_results(payload, Path(config.results_dir))

    log.info(
        f"[ORCHESTRATOR COMPLETE] {len(names)} layout(s) executed",
        extra={"layouts": names, "ok": ok},
    )
    return results


__all__ = [
    "RunConfig",
    "available_layouts",
    "has_store_errors",
    "random_order",
    "run_benchmark",
    "run_layout",
    "write_layouts",
]
