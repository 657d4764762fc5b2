"""
Google Cloud Datastore implementation of the `StoreClient` contract.

Translates `StoreKey`/`QueryFilter` into google-cloud-datastore keys and
queries, and wraps every library failure into `StoreError` so the runner can
report it and continue. Client creation is retried with tenacity for transient
transport errors; a final failure is fatal for the caller.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import datastore
from google.cloud.datastore.query import PropertyFilter
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.infrastructure.store import Properties, QueryFilter, StoreError, StoreKey
from src.utils.logging import get_logger

log = get_logger(__name__)

# Client-side key/value validation errors surface as ValueError/TypeError;
# expired or unrefreshable credentials surface as GoogleAuthError mid-run.
_WRAPPED_ERRORS = (
    api_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    ValueError,
    TypeError,
)


def _to_datastore_value(value: Any) -> Any:
    """Convert nested dicts (embedded records) into key-less embedded entities."""
    if isinstance(value, dict):
        embedded = datastore.Entity(exclude_from_indexes=tuple(value.keys()))
        embedded.update({k: _to_datastore_value(v) for k, v in value.items()})
        return embedded
    if isinstance(value, list):
        return [_to_datastore_value(item) for item in value]
    return value


def _from_datastore_value(value: Any) -> Any:
    if isinstance(value, datastore.Entity):
        return {k: _from_datastore_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_datastore_value(item) for item in value]
    return value


class DatastoreStoreClient:
    """
    `StoreClient` backed by `google.cloud.datastore.Client`.

    Calls are synchronous and blocking; timeout/retry policy is left to the
    library defaults.
    """

    def __init__(self, client: datastore.Client) -> None:
        self._client = client

    @property
    def project(self) -> Optional[str]:
        return self._client.project

    def key(self, key: StoreKey) -> datastore.Key:
        return self._client.key(*key.path)

    def put(
        self,
        key: StoreKey,
        properties: Properties,
        exclude_from_indexes: Sequence[str] = (),
    ) -> None:
        try:
            entity = datastore.Entity(
                key=self.key(key), exclude_from_indexes=tuple(exclude_from_indexes)
            )
            entity.update({k: _to_datastore_value(v) for k, v in properties.items()})
            self._client.put(entity)
        except _WRAPPED_ERRORS as exc:
            raise StoreError("Put", key.kind, exc) from exc

    def get(self, key: StoreKey) -> Optional[Properties]:
        try:
            entity = self._client.get(self.key(key))
        except _WRAPPED_ERRORS as exc:
            raise StoreError("Get", key.kind, exc) from exc
        if entity is None:
            return None
        return _from_datastore_value(entity)

    def query(
        self,
        kind: str,
        ancestor: Optional[StoreKey] = None,
        filters: Iterable[QueryFilter] = (),
    ) -> List[Properties]:
        try:
            q = self._client.query(
                kind=kind, ancestor=self.key(ancestor) if ancestor is not None else None
            )
            for f in filters:
                q.add_filter(filter=PropertyFilter(f.field, f.op, f.value))
            return [_from_datastore_value(entity) for entity in q.fetch()]
        except _WRAPPED_ERRORS as exc:
            raise StoreError("Query", kind, exc) from exc

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(
        (auth_exceptions.TransportError, api_exceptions.ServiceUnavailable)
    ),
    reraise=True,
)
def connect_datastore(
    project_id: Optional[str] = None, namespace: Optional[str] = None
) -> DatastoreStoreClient:
    """
    Create a Datastore-backed store client with automatic retry.

    Parameters
    ----------
    project_id : str | None
        Target project/dataset id. Defaults to settings (`GCLOUD_DATASET_ID`),
        then to the library's environment detection.
    namespace : str | None
        Optional Datastore namespace.

    Raises
    ------
    google.auth.exceptions.GoogleAuthError
        If credentials cannot be resolved after all retry attempts.
    """
    settings = get_settings()
    project = project_id or settings.gcloud_dataset_id
    client = datastore.Client(project=project, namespace=namespace or settings.datastore_namespace)
    log.info("Datastore client ready", extra={"project": client.project})
    return DatastoreStoreClient(client)


__all__ = ["DatastoreStoreClient", "connect_datastore"]
