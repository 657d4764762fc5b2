"""
Datastore Layout Benchmark - read-latency micro-benchmark for Datastore layouts.

Compares four ways of storing a user's repeated records in Google Cloud
Datastore:

- A single entity holding an embedded list of records
- An entity group under a per-user parent key
- An entity group additionally filtered by an indexed owner id
- Flat root entities filtered by an indexed owner id

Each layout writes the same synthetic dataset, reads it back in a random
per-user order and reports the average read latency per user.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from src.config import Settings, get_settings
from src.orchestrator import RunConfig, available_layouts, run_benchmark, run_layout
from src.reporter import ListReportSink, ReportSink, StreamReportSink
from src.strategies.abstract import (
    AbstractLayoutStrategy,
    LayoutResult,
    LayoutStrategy,
    ReportEvent,
)
from src.utils.logging import configure_logging, get_logger
from src.utils.profiler import ProfileStats, profile_block

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Orchestration
    "RunConfig",
    "available_layouts",
    "run_benchmark",
    "run_layout",
    # Layout abstractions
    "LayoutStrategy",
    "AbstractLayoutStrategy",
    "LayoutResult",
    "ReportEvent",
    # Reporting
    "ReportSink",
    "ListReportSink",
    "StreamReportSink",
    # Logging
    "configure_logging",
    "get_logger",
    # Profiling
    "ProfileStats",
    "profile_block",
]
