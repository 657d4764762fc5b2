"""
Store client contract for the Datastore Layout Benchmark.

Layouts and the runner only talk to the document store through the
`StoreClient` protocol defined here: put-by-key, get-by-key and
query-by-filter. Concrete clients live in `datastore_client` (Google Cloud
Datastore) and `memory_store` (in-process dictionary, used for tests and dry
runs).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

Properties = Dict[str, Any]


@dataclass(frozen=True)
class StoreKey:
    """
    Fully-qualified entity key: kind + name, optionally under a parent key.
    """

    kind: str
    name: str
    parent: Optional["StoreKey"] = None

    @property
    def path(self) -> Tuple[str, ...]:
        """Flattened ancestor path, root first: ``(kind, name, kind, name, ...)``."""
        prefix = self.parent.path if self.parent is not None else ()
        return prefix + (self.kind, self.name)

    def is_descendant_of(self, ancestor: "StoreKey") -> bool:
        """True for the ancestor itself and every key below it."""
        ancestor_path = ancestor.path
        return self.path[: len(ancestor_path)] == ancestor_path

    def __str__(self) -> str:
        return "".join(f"/{kind},{name}" for kind, name in zip(self.path[::2], self.path[1::2]))


@dataclass(frozen=True)
class QueryFilter:
    """Equality predicate on an indexed property."""

    field: str
    value: Any
    op: str = "="

    def __post_init__(self) -> None:
        if self.op != "=":
            raise ValueError(f"Unsupported filter operator '{self.op}'; only '=' is supported")


class StoreError(Exception):
    """
    A put/get/query against the store failed.

    Carries the operation name and kind so report lines can name them.
    """

    def __init__(self, operation: str, kind: str, cause: BaseException | str) -> None:
        self.operation = operation
        self.kind = kind
        self.cause = cause
        super().__init__(f"Could not {operation} {kind} to datastore: {cause}")


class RecordNotFoundError(StoreError):
    """A get by exact key found no entity."""

    def __init__(self, key: StoreKey) -> None:
        self.key = key
        super().__init__("Get", key.kind, f"no entity at key {key}")


@runtime_checkable
class StoreClient(Protocol):
    """
    Minimal document-store interface consumed by the layouts.

    Implementations raise `StoreError` for any failed operation.
    """

    def put(
        self,
        key: StoreKey,
        properties: Properties,
        exclude_from_indexes: Sequence[str] = (),
    ) -> None:
        """Upsert `properties` at `key`."""
        ...

    def get(self, key: StoreKey) -> Optional[Properties]:
        """Fetch one entity by exact key; ``None`` when absent."""
        ...

    def query(
        self,
        kind: str,
        ancestor: Optional[StoreKey] = None,
        filters: Iterable[QueryFilter] = (),
    ) -> List[Properties]:
        """Fetch all entities of `kind`, optionally ancestor-scoped and equality-filtered."""
        ...

    def close(self) -> None:
        """Release client resources."""
        ...


__all__ = [
    "Properties",
    "QueryFilter",
    "RecordNotFoundError",
    "StoreClient",
    "StoreError",
    "StoreKey",
]
