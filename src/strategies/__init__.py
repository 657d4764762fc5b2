"""
Layout strategies package for the Datastore Layout Benchmark.

This module re-exports the abstract interfaces and the concrete layout classes
so downstream code can import from `src.strategies` directly.
"""

from src.strategies.abstract import (
    AbstractLayoutStrategy,
    LayoutResult,
    LayoutStrategy,
    ReportEvent,
)
from src.strategies.embedded_list import EmbeddedListLayout
from src.strategies.flat_indexed import FlatIndexedLayout
from src.strategies.grouped import GroupedLayout
from src.strategies.grouped_indexed import GroupedIndexedLayout

__all__ = [
    # Abstracts
    "AbstractLayoutStrategy",
    "LayoutResult",
    "LayoutStrategy",
    "ReportEvent",
    # Concrete layouts
    "EmbeddedListLayout",
    "FlatIndexedLayout",
    "GroupedIndexedLayout",
    "GroupedLayout",
]
