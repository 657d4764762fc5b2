"""
Domain models for the Datastore Layout Benchmark.

A `TestAttemptRecord` is one synthetic practice-test attempt of a user. The
embedded-list layout stores all of a user's attempts inline in a single
`EmbeddedRecordSet`; the other layouts store each attempt as its own entity.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from pydantic import BaseModel, Field

BASE_ADMIN_YEAR = 2000

# Property names as stored in Datastore.
ADMIN_YEAR_PROPERTY = "admin_year"
OWNER_ID_PROPERTY = "kaid"
EMBEDDED_RECORDS_PROPERTY = "user_practice_tests"


class TestAttemptRecord(BaseModel):
    """
    One synthetic unit of user activity.
    """

    __test__ = False  # not a pytest test class

    admin_year: int = Field(..., description="Descriptive payload; never queried (unindexed).")
    owner_id: str = Field(..., description="Identifier of the owning user (stored as `kaid`).")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    def to_properties(self) -> Dict[str, Any]:
        return {ADMIN_YEAR_PROPERTY: self.admin_year, OWNER_ID_PROPERTY: self.owner_id}

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "TestAttemptRecord":
        return cls(
            admin_year=properties.get(ADMIN_YEAR_PROPERTY, 0),
            owner_id=properties.get(OWNER_ID_PROPERTY, ""),
        )


class EmbeddedRecordSet(BaseModel):
    """
    Container entity holding a user's attempts inline as an unindexed list.
    """

    records: Tuple[TestAttemptRecord, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    def __len__(self) -> int:
        return len(self.records)

    def to_properties(self) -> Dict[str, Any]:
        return {EMBEDDED_RECORDS_PROPERTY: [r.to_properties() for r in self.records]}

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "EmbeddedRecordSet":
        # Datastore omits empty lists, so a missing property is an empty set.
        raw = properties.get(EMBEDDED_RECORDS_PROPERTY) or []
        return cls(records=tuple(TestAttemptRecord.from_properties(item) for item in raw))


def owner_id_for(user_index: int) -> str:
    """Deterministic owner id for a user index, e.g. ``kaid_0007``."""
    return f"kaid_{user_index:04d}"


def make_test_attempts(
    owner_id: str, count: int, base_year: int = BASE_ADMIN_YEAR
) -> List[TestAttemptRecord]:
    """
    Build `count` attempts for `owner_id` with ``admin_year = base_year + index``.

    Raises
    ------
    ValueError
        If `count` is negative.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    return [TestAttemptRecord(admin_year=base_year + i, owner_id=owner_id) for i in range(count)]


def make_embedded_record_set(owner_id: str, count: int) -> EmbeddedRecordSet:
    return EmbeddedRecordSet(records=tuple(make_test_attempts(owner_id, count)))


__all__ = [
    "ADMIN_YEAR_PROPERTY",
    "BASE_ADMIN_YEAR",
    "EMBEDDED_RECORDS_PROPERTY",
    "EmbeddedRecordSet",
    "OWNER_ID_PROPERTY",
    "TestAttemptRecord",
    "make_embedded_record_set",
    "make_test_attempts",
    "owner_id_for",
]
