"""
Embedded-list layout: one entity per user holding all attempts inline.

The attempts live in an unindexed repeated structured property, so a read is a
single get by key and there is nothing to filter on.
"""

from __future__ import annotations

from typing import List

from src.domain.models import (
    EMBEDDED_RECORDS_PROPERTY,
    EmbeddedRecordSet,
    make_embedded_record_set,
    owner_id_for,
)
from src.infrastructure.store import RecordNotFoundError, StoreError, StoreKey
from src.strategies.abstract import AbstractLayoutStrategy
from src.utils.logging import get_logger

log = get_logger(__name__)


class EmbeddedListLayout(AbstractLayoutStrategy):
    """
    Single put of an `EmbeddedRecordSet` per user; single get to read it back.
    """

    name: str = "embedded_list"
    label: str = "Repeated Structured Properties"
    kind: str = "UserPracticeTestRepeated"

    def key_for(self, user_index: int) -> StoreKey:
        return StoreKey(self.kind, f"TestRepeatedKey{user_index:04d}")

    def write(self, user_index: int) -> List[StoreError]:
        key = self.key_for(user_index)
        record_set = make_embedded_record_set(owner_id_for(user_index), self.records_per_user)
        try:
            self.client.put(
                key,
                record_set.to_properties(),
                exclude_from_indexes=(EMBEDDED_RECORDS_PROPERTY,),
            )
        except StoreError as exc:
            log.warning(str(exc), extra={"layout": self.name, "key": str(key)})
            return [exc]
        return []

    def read(self, user_index: int) -> int:
        key = self.key_for(user_index)
        properties = self.client.get(key)
        if properties is None:
            raise RecordNotFoundError(key)
        return len(EmbeddedRecordSet.from_properties(properties))

    def subject(self, user_index: int) -> str:
        return str(self.key_for(user_index))


__all__ = ["EmbeddedListLayout"]
