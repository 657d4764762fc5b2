"""
Domain package for the Datastore Layout Benchmark.

Exports the record models shared by the layouts and the runner.
Keep this package focused on data definitions and validation concerns.
"""

from src.domain.models import (
    EmbeddedRecordSet,
    TestAttemptRecord,
    make_embedded_record_set,
    make_test_attempts,
    owner_id_for,
)

__all__ = [
    "EmbeddedRecordSet",
    "TestAttemptRecord",
    "make_embedded_record_set",
    "make_test_attempts",
    "owner_id_for",
]
