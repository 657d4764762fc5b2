"""
Pytest configuration for the Datastore Layout Benchmark.

Provides fixtures for:
- An in-memory store client (unit tests)
- A small, seeded run configuration
- Settings cache isolation
- A Datastore emulator client for integration tests
"""

from __future__ import annotations

import os
import uuid
from typing import Generator

import pytest

from src.config import get_settings
from src.infrastructure.memory_store import InMemoryStoreClient
from src.orchestrator import RunConfig

SMALL_USERS = 2
SMALL_RECORDS_PER_USER = 3
FIXED_SEED = 42


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch) -> Generator[None, None, None]:
    """
    Clear the cached settings around every test so env overrides apply.
    """
    for name in ("BENCHMARK_NUM_USERS", "BENCHMARK_RECORDS_PER_USER", "BENCHMARK_SEED"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def memory_store() -> InMemoryStoreClient:
    return InMemoryStoreClient()


@pytest.fixture
def small_config() -> RunConfig:
    """Two users, three records each, deterministic read order."""
    return RunConfig(
        num_users=SMALL_USERS,
        records_per_user=SMALL_RECORDS_PER_USER,
        do_write=True,
        seed=FIXED_SEED,
    )


@pytest.fixture(scope="session")
def datastore_emulator_client():
    """
    Store client bound to the Datastore emulator, in a throwaway namespace.

    Skips unless RUN_INTEGRATION_TESTS=1 and DATASTORE_EMULATOR_HOST is set.
    """
    if os.getenv("RUN_INTEGRATION_TESTS", "0") != "1" or not os.getenv("DATASTORE_EMULATOR_HOST"):
        pytest.skip("Integration tests require RUN_INTEGRATION_TESTS=1 and a Datastore emulator")

    from src.infrastructure.datastore_client import connect_datastore

    client = connect_datastore(
        os.getenv("GCLOUD_DATASET_ID", "layout-bench-test"),
        namespace=f"test-{uuid.uuid4().hex[:8]}",
    )
    try:
        yield client
    finally:
        client.close()
