"""
Flat indexed layout: root entities sharing only an indexed `kaid` value.
"""

from __future__ import annotations

from typing import List

from src.domain.models import OWNER_ID_PROPERTY, owner_id_for
from src.infrastructure.store import Properties, QueryFilter, StoreError, StoreKey
from src.strategies.abstract import AbstractLayoutStrategy


class FlatIndexedLayout(AbstractLayoutStrategy):
    """
    K parentless puts; reads are a global equality query on `kaid`.
    """

    name: str = "flat_indexed"
    label: str = "Entity (Indexed)"
    kind: str = "UserPracticeTestIndexed"
    subject_label: str = "kaid"

    def keys_for(self, user_index: int) -> List[StoreKey]:
        base = user_index * self.records_per_user
        return [StoreKey(self.kind, f"TestKey{base + j}") for j in range(self.records_per_user)]

    def write(self, user_index: int) -> List[StoreError]:
        return self._put_records(self.keys_for(user_index), self.records_for(user_index))

    def fetch_by_owner(self, owner_id: str) -> List[Properties]:
        return self.client.query(self.kind, filters=[QueryFilter(OWNER_ID_PROPERTY, owner_id)])

    def read(self, user_index: int) -> int:
        return len(self.fetch_by_owner(owner_id_for(user_index)))

    def subject(self, user_index: int) -> str:
        return owner_id_for(user_index)


__all__ = ["FlatIndexedLayout"]
