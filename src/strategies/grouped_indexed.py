"""
Indexed entity-group layout: per-user parent key plus an indexed `kaid`.

Reads combine the ancestor scope with an equality filter on the owner id.
"""

from __future__ import annotations

from typing import List

from src.domain.models import OWNER_ID_PROPERTY, owner_id_for
from src.infrastructure.store import QueryFilter, StoreError, StoreKey
from src.strategies.abstract import AbstractLayoutStrategy


class GroupedIndexedLayout(AbstractLayoutStrategy):
    """
    K puts under ``UserPracticeTestParentIndexed/ParentKey{i}``, read by ancestor + kaid.
    """

    name: str = "grouped_indexed"
    label: str = "Entity (Indexed Group)"
    kind: str = "UserPracticeTestIndexedGroup"
    parent_kind: str = "UserPracticeTestParentIndexed"

    def parent_key(self, user_index: int) -> StoreKey:
        return StoreKey(self.parent_kind, f"ParentKey{user_index}")

    def keys_for(self, user_index: int) -> List[StoreKey]:
        parent = self.parent_key(user_index)
        base = user_index * self.records_per_user
        return [
            StoreKey(self.kind, f"TestKey{base + j}", parent=parent)
            for j in range(self.records_per_user)
        ]

    def write(self, user_index: int) -> List[StoreError]:
        return self._put_records(self.keys_for(user_index), self.records_for(user_index))

    def read(self, user_index: int) -> int:
        results = self.client.query(
            self.kind,
            ancestor=self.parent_key(user_index),
            filters=[QueryFilter(OWNER_ID_PROPERTY, owner_id_for(user_index))],
        )
        return len(results)

    def subject(self, user_index: int) -> str:
        return str(self.parent_key(user_index))


__all__ = ["GroupedIndexedLayout"]
