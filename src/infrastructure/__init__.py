"""
Infrastructure package for the Datastore Layout Benchmark.

Centralizes document-store connectivity: the `StoreClient` contract, the
Google Cloud Datastore adapter and the in-memory client. Keep this layer
focused on I/O, decoupled from layout/runner logic.
"""

from src.infrastructure.memory_store import InMemoryStoreClient
from src.infrastructure.store import (
    QueryFilter,
    RecordNotFoundError,
    StoreClient,
    StoreError,
    StoreKey,
)

__all__ = [
    "InMemoryStoreClient",
    "QueryFilter",
    "RecordNotFoundError",
    "StoreClient",
    "StoreError",
    "StoreKey",
]
