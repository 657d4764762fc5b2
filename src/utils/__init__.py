"""
Utilities package for the Datastore Layout Benchmark.

Exports shared helpers for logging and profiling.
Keep this package lightweight and free of domain-specific logic.
"""

from src.utils.logging import configure_logging, get_logger
from src.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
