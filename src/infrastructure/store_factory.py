"""
Store client factory for the Datastore Layout Benchmark.

Selects the backend named by settings (`BENCHMARK_BACKEND`) or the caller:
- "datastore": Google Cloud Datastore for `GCLOUD_DATASET_ID` (the emulator is
  picked up from `DATASTORE_EMULATOR_HOST` by the client library)
- "memory": in-process store, for dry runs without credentials
"""

from __future__ import annotations

from typing import Optional

from src.config import get_settings
from src.infrastructure.memory_store import InMemoryStoreClient
from src.infrastructure.store import StoreClient

BACKENDS = ("datastore", "memory")


def build_store_client(
    backend: Optional[str] = None, project_id: Optional[str] = None
) -> StoreClient:
    """
    Create the store client for `backend`.

    Raises
    ------
    ValueError
        For an unknown backend name.
    google.auth.exceptions.GoogleAuthError
        If the Datastore client cannot be created (fatal at startup).
    """
    settings = get_settings()
    name = (backend or settings.benchmark_backend).lower()
    if name == "memory":
        return InMemoryStoreClient()
    if name == "datastore":
        # Deferred so the memory backend works without Google credentials.
        from src.infrastructure.datastore_client import connect_datastore

        return connect_datastore(project_id or settings.gcloud_dataset_id)
    raise ValueError(f"Unknown backend '{name}'. Available: {', '.join(BACKENDS)}")


__all__ = ["BACKENDS", "build_store_client"]
