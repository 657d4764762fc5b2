"""
Abstract layout-strategy interfaces and result contracts for the Datastore Layout Benchmark.

A layout strategy decides how one user's K records are addressed in the store
(write) and how they are fetched back (read). Concrete layouts (embedded list,
entity group, indexed entity group, flat indexed) implement the
`LayoutStrategy` protocol so the runner can drive all four uniformly.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, List, Optional, Protocol, TypedDict, runtime_checkable

from src.domain.models import (
    ADMIN_YEAR_PROPERTY,
    BASE_ADMIN_YEAR,
    TestAttemptRecord,
    make_test_attempts,
    owner_id_for,
)
from src.infrastructure.store import StoreClient, StoreError, StoreKey
from src.utils.logging import get_logger

log = get_logger(__name__)


class ReportEvent(TypedDict, total=False):
    """
    One entry of the structured result channel.

    `type` is one of "store_error", "verification_failure" or "timing".
    """

    type: str
    message: str
    user: Optional[int]


class LayoutResult(TypedDict, total=False):
    """
    Metrics contract produced by the runner for one layout.

    Fields are optional so reporters tolerate partially filled results.
    """

    layout: str
    label: str
    kind: str
    num_users: int
    records_per_user: int
    do_write: bool
    seed: int
    read_order: List[int]
    read_duration_seconds: float
    avg_read_latency_seconds: float
    avg_read_latency_ms: float
    records_read: int
    write_errors: int
    read_errors: int
    verification_failures: int
    events: List[ReportEvent]
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    extra: Dict[str, Any]


@runtime_checkable
class LayoutStrategy(Protocol):
    """
    Common interface all storage layouts must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    label : str
        Human-friendly name used in report lines.
    kind : str
        Datastore kind holding this layout's records.
    subject_label : str
        What `subject` returns, "key" or "kaid".
    """

    name: str
    label: str
    kind: str
    subject_label: str

    def write(self, user_index: int) -> List[StoreError]:
        """
        Build and persist the records of one user.

        Returns
        -------
        list[StoreError]
            Failed puts; an empty list when every put succeeded.
        """
        ...

    def read(self, user_index: int) -> int:
        """
        Fetch back all records of one user and return how many were found.

        Raises
        ------
        StoreError
            If the get/query itself fails.
        """
        ...

    def subject(self, user_index: int) -> str:
        """Identifier named in verification-failure lines for this user."""
        ...


class AbstractLayoutStrategy(abc.ABC):
    """
    ABC helper for class-based layouts.

    Subclasses set `name`, `label` and `kind` and implement `write`, `read`
    and `subject`. Layouts that store one entity per record can use
    `_put_records` to get the best-effort write loop.
    """

    name: str
    label: str
    kind: str
    # Verification lines name either the key or the owner id of the user.
    subject_label: str = "key"

    def __init__(self, client: StoreClient, records_per_user: int) -> None:
        if records_per_user < 0:
            raise ValueError(f"records_per_user must be >= 0, got {records_per_user}")
        self.client = client
        self.records_per_user = records_per_user

    def records_for(self, user_index: int) -> List[TestAttemptRecord]:
        """Discrete records of one user; admin years are unique across users."""
        return make_test_attempts(
            owner_id_for(user_index),
            self.records_per_user,
            base_year=BASE_ADMIN_YEAR + self.records_per_user * user_index,
        )

    def _put_records(
        self, keys: List[StoreKey], records: List[TestAttemptRecord]
    ) -> List[StoreError]:
        errors: List[StoreError] = []
        for key, record in zip(keys, records):
            try:
                self.client.put(
                    key, record.to_properties(), exclude_from_indexes=(ADMIN_YEAR_PROPERTY,)
                )
            except StoreError as exc:
                log.warning(str(exc), extra={"layout": self.name, "key": str(key)})
                errors.append(exc)
        return errors

    @abc.abstractmethod
    def write(self, user_index: int) -> List[StoreError]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def read(self, user_index: int) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def subject(self, user_index: int) -> str:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "AbstractLayoutStrategy",
    "LayoutResult",
    "LayoutStrategy",
    "ReportEvent",
]
