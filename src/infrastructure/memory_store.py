"""
In-process `StoreClient` for dry runs and tests.

Mirrors the Datastore semantics the layouts rely on: ancestor queries match
the ancestor and every descendant, and equality filters only see indexed
properties (anything listed in `exclude_from_indexes` is invisible to them).
"""

from __future__ import annotations

import copy
import threading
from collections import Counter
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from src.infrastructure.store import Properties, QueryFilter, StoreError, StoreKey

FailurePredicate = Callable[[str, StoreKey | str], bool]


class InMemoryStoreClient:
    """
    Dictionary-backed store keyed by full key path.

    Parameters
    ----------
    fail_on : callable | None
        Optional failure injector called as ``fail_on(operation, key_or_kind)``
        for every operation; returning True makes that operation raise
        `StoreError`. `operation` is one of "Put", "Get", "Query".
    """

    def __init__(self, fail_on: Optional[FailurePredicate] = None) -> None:
        self._entities: Dict[Tuple[str, ...], Tuple[StoreKey, Properties, FrozenSet[str]]] = {}
        self._lock = threading.Lock()
        self._fail_on = fail_on
        self.operation_counts: Counter[Tuple[str, str]] = Counter()
        self.closed = False

    def _check(self, operation: str, kind: str, target: StoreKey | str) -> None:
        with self._lock:
            self.operation_counts[(operation, kind)] += 1
        if self.closed:
            raise StoreError(operation, kind, "client is closed")
        if self._fail_on is not None and self._fail_on(operation, target):
            raise StoreError(operation, kind, "injected failure")

    def put(
        self,
        key: StoreKey,
        properties: Properties,
        exclude_from_indexes: Sequence[str] = (),
    ) -> None:
        self._check("Put", key.kind, key)
        with self._lock:
            self._entities[key.path] = (
                key,
                copy.deepcopy(dict(properties)),
                frozenset(exclude_from_indexes),
            )

    def get(self, key: StoreKey) -> Optional[Properties]:
        self._check("Get", key.kind, key)
        with self._lock:
            stored = self._entities.get(key.path)
        if stored is None:
            return None
        return copy.deepcopy(stored[1])

    def query(
        self,
        kind: str,
        ancestor: Optional[StoreKey] = None,
        filters: Iterable[QueryFilter] = (),
    ) -> List[Properties]:
        self._check("Query", kind, kind)
        predicates = list(filters)
        with self._lock:
            candidates = sorted(self._entities.values(), key=lambda item: item[0].path)
        results: List[Properties] = []
        for key, properties, unindexed in candidates:
            if key.kind != kind:
                continue
            if ancestor is not None and not key.is_descendant_of(ancestor):
                continue
            if all(
                f.field not in unindexed
                and f.field in properties
                and properties[f.field] == f.value
                for f in predicates
            ):
                results.append(copy.deepcopy(properties))
        return results

    def keys(self, kind: Optional[str] = None) -> List[StoreKey]:
        """Stored keys, optionally restricted to one kind."""
        with self._lock:
            return [key for key, _, _ in self._entities.values() if kind is None or key.kind == kind]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)

    def close(self) -> None:
        self.closed = True


def fail_puts_for(keys: Iterable[StoreKey]) -> FailurePredicate:
    """Failure injector that rejects puts to the given keys."""
    paths = {key.path for key in keys}

    def _predicate(operation: str, target: StoreKey | str) -> bool:
        return operation == "Put" and isinstance(target, StoreKey) and target.path in paths

    return _predicate


__all__ = ["FailurePredicate", "InMemoryStoreClient", "fail_puts_for"]
