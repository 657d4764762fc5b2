"""
Entity-group layout: one entity per attempt, all under a per-user parent key.

Reads rely on ancestor locality only; `kaid` is stored but never filtered on.
"""

from __future__ import annotations

from typing import List

from src.infrastructure.store import StoreError, StoreKey
from src.strategies.abstract import AbstractLayoutStrategy


class GroupedLayout(AbstractLayoutStrategy):
    """
    K puts under ``UserPracticeTestParent/ParentKey{i:04}``; ancestor query to read.
    """

    name: str = "grouped"
    label: str = "Entity Group"
    kind: str = "UserPracticeTestGroup"
    parent_kind: str = "UserPracticeTestParent"

    def parent_key(self, user_index: int) -> StoreKey:
        return StoreKey(self.parent_kind, f"ParentKey{user_index:04d}")

    def keys_for(self, user_index: int) -> List[StoreKey]:
        # Child names only need to be unique within the group.
        parent = self.parent_key(user_index)
        return [
            StoreKey(self.kind, f"TestKey{j:04d}", parent=parent)
            for j in range(self.records_per_user)
        ]

    def write(self, user_index: int) -> List[StoreError]:
        return self._put_records(self.keys_for(user_index), self.records_for(user_index))

    def read(self, user_index: int) -> int:
        return len(self.client.query(self.kind, ancestor=self.parent_key(user_index)))

    def subject(self, user_index: int) -> str:
        return str(self.parent_key(user_index))


__all__ = ["GroupedLayout"]
