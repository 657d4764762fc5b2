"""
Process profiling around one layout run.

The runner times the read phase itself with an injectable clock; this module
only reports what the harness process cost while a layout ran: wall time,
CPU share and peak resident memory, sampled with psutil.

Usage:
    from src.utils.profiler import profile_block

    with profile_block("grouped") as stats:
        ...

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """Resource usage of one profiled layout run."""

    label: str
    duration_seconds: float = 0.0
    peak_rss_bytes: Optional[int] = None
    cpu_percent: Optional[float] = None
    extra: dict[str, Any] = field(default_factory=dict)


class _RssSampler(threading.Thread):
    """Polls the resident set size of `process` until stopped, keeping the max."""

    def __init__(self, process: psutil.Process, label: str, interval_seconds: float) -> None:
        super().__init__(name=f"rss-sampler-{label}", daemon=True)
        self._process = process
        self._interval = interval_seconds
        self._halt = threading.Event()
        self.peak = process.memory_info().rss

    def run(self) -> None:
        while not self._halt.is_set():
            try:
                self.peak = max(self.peak, self._process.memory_info().rss)
            except psutil.Error:
                return
            self._halt.wait(timeout=self._interval)

    def stop(self) -> int:
        self._halt.set()
        self.join(timeout=1.0)
        return self.peak


@contextlib.contextmanager
def profile_block(label: str, sample_interval_ms: int = 50) -> Generator[ProfileStats, None, None]:
    """
    Profile the enclosed block.

    Parameters
    ----------
    label : str
        Layout name, used for the sampler thread name.
    sample_interval_ms : int
        RSS polling interval. Datastore round trips are milliseconds long, so
        the default keeps the sampler off the hot path.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    sampler = _RssSampler(process, label, sample_interval_ms / 1000.0)

    process.cpu_percent(interval=None)  # primes the CPU counter
    sampler.start()
    started = time.perf_counter()
    try:
        yield stats
    finally:
        stats.duration_seconds = time.perf_counter() - started
        peak = sampler.stop()
        stats.peak_rss_bytes = peak or None
        stats.cpu_percent = process.cpu_percent(interval=None)


__all__ = ["ProfileStats", "profile_block"]
