"""Google Cloud Datastore adapter implementing the Datastore protocol.

Stores dataclass and Pydantic records as native datastore entities.
Scalar fields and lists of scalars are stored as indexed properties; nested
records, enums, dicts and other complex values are JSON-serialized with
pydantic under a ``_json_`` prefixed, unindexed property. Loading rebuilds
them against the record's field types.

Usage:
    from dskit.adapters.cloud_datastore import CloudDatastore
    from dskit.config import DatastoreSettings

    store = CloudDatastore.from_settings(DatastoreSettings(project="my-project"))
    ctx = Context.create(store)
    save(ctx, Post(title="Hello"))
"""

from __future__ import annotations

import datetime
import json
import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic_core import to_jsonable_python

from dskit.config import DatastoreSettings
from dskit.core.fields import iter_fields
from dskit.core.identity import Key
from dskit.errors import (
    AllocationError,
    EntityNotFoundError,
    StoreQueryError,
    StoreReadError,
    StoreWriteError,
)
from dskit.storage.protocol import Query

if TYPE_CHECKING:
    from google.cloud import datastore

# Prefix of properties holding JSON-serialized complex values
_JSON_PREFIX = "_json_"

_SCALARS = (str, int, float, bool, bytes, datetime.datetime)


def _api_errors() -> tuple[type[BaseException], ...]:
    """Exception types raised by the google client for failed calls."""
    from google.api_core.exceptions import GoogleAPICallError, RetryError

    return (GoogleAPICallError, RetryError)


def _is_native(value: Any) -> bool:
    """Check if the datastore can store value as an indexed property."""
    if value is None or isinstance(value, _SCALARS):
        return True
    if isinstance(value, list | tuple):
        return all(v is None or isinstance(v, _SCALARS) for v in value)
    return False


def _to_properties(
    entity: Any,
    skip: frozenset[str] = frozenset(),
    to_key: Callable[[Key], Any] = lambda key: list(key.flat_path()),
) -> tuple[dict[str, Any], set[str]]:
    """Flatten a record (or dict) into datastore properties.

    Args:
        entity: Record or dict.
        skip: Field names not to store (such as the key attribute).
        to_key: Converts Key values into something the store accepts.

    Returns:
        (properties, names of properties to exclude from indexes).

    Raises:
        ValueError: If a complex value cannot be JSON-encoded.
    """
    items = entity.items() if isinstance(entity, dict) else iter_fields(entity)
    properties: dict[str, Any] = {}
    unindexed: set[str] = set()
    for name, value in items:
        if name in skip:
            continue
        if isinstance(value, Key):
            properties[name] = to_key(value)
        elif _is_native(value):
            properties[name] = list(value) if isinstance(value, tuple) else value
        else:
            json_name = f"{_JSON_PREFIX}{name}"
            properties[json_name] = json.dumps(to_jsonable_python(value))
            unindexed.add(json_name)
    return properties, unindexed


def _from_properties(properties: dict[str, Any]) -> dict[str, Any]:
    """Reverse _to_properties: decode JSON-serialized values."""
    result: dict[str, Any] = {}
    for name, value in properties.items():
        if name.startswith(_JSON_PREFIX):
            result[name[len(_JSON_PREFIX) :]] = json.loads(value)
        elif _is_native_key(value):
            result[name] = _from_native_key(value)
        else:
            result[name] = value
    return result


def _is_native_key(value: Any) -> bool:
    return hasattr(value, "kind") and hasattr(value, "id_or_name") and hasattr(value, "flat_path")


def _from_native_key(native: Any) -> Key:
    """Convert a google.cloud.datastore.Key into a Key."""
    parent = _from_native_key(native.parent) if native.parent is not None else None
    return Key(native.kind, native.id_or_name, parent)


def _to_native_key(client: Any, key: Key) -> Any:
    """Convert a Key into a google.cloud.datastore.Key bound to client."""
    return client.key(*key.flat_path())


class CloudDatastore:
    """Google Cloud Datastore implementation of the Datastore protocol.

    Attributes:
        client: The underlying google.cloud.datastore.Client.
        settings: Settings naming the key attribute to leave out of stored
            properties.
    """

    def __init__(self, client: datastore.Client, settings: DatastoreSettings | None = None) -> None:
        """Initialize adapter with a datastore client.

        Use factory methods instead of direct construction.

        Args:
            client: google.cloud.datastore.Client instance.
            settings: Settings (default: loaded from the environment).
        """
        self._client = client
        self._settings = settings if settings is not None else DatastoreSettings()

    @classmethod
    def from_client(
        cls,
        client: datastore.Client,
        settings: DatastoreSettings | None = None,
    ) -> CloudDatastore:
        """Create adapter from an existing client."""
        return cls(client, settings)

    @classmethod
    def from_settings(cls, settings: DatastoreSettings | None = None) -> CloudDatastore:
        """Create adapter with a client built from settings.

        When settings.emulator_host is set, DATASTORE_EMULATOR_HOST is exported
        so the client talks to the local emulator.

        Args:
            settings: Settings (default: loaded from the environment).

        Returns:
            Configured CloudDatastore instance.
        """
        try:
            from google.cloud import datastore
        except ImportError as e:
            raise ImportError(
                "google-cloud-datastore is required for CloudDatastore. "
                "Install with: pip install dskit[gcloud]"
            ) from e

        settings = settings if settings is not None else DatastoreSettings()
        if settings.emulator_host:
            os.environ["DATASTORE_EMULATOR_HOST"] = settings.emulator_host
        client = datastore.Client(
            project=settings.project,
            namespace=settings.namespace,
            database=settings.database,
        )
        return cls(client, settings)

    @property
    def client(self) -> datastore.Client:
        """Get the underlying client."""
        return self._client

    def put(self, key: Key, entity: Any) -> Key:
        """Write entity under key.

        Raises:
            StoreWriteError: If the client rejects the write.
        """
        from google.cloud import datastore

        try:
            properties, unindexed = _to_properties(
                entity,
                skip=frozenset({self._settings.key_field}),
                to_key=lambda k: _to_native_key(self._client, k),
            )
            native = datastore.Entity(
                key=_to_native_key(self._client, key), exclude_from_indexes=tuple(unindexed)
            )
            native.update(properties)
            self._client.put(native)
        except (*_api_errors(), ValueError) as e:
            raise StoreWriteError(f"put {key}: {e}") from e
        # put() completes incomplete keys in place
        return _from_native_key(native.key)

    def get(self, key: Key) -> dict[str, Any]:
        """Read the properties stored under key.

        Raises:
            EntityNotFoundError: If nothing is stored under key.
            StoreReadError: If the read fails.
        """
        try:
            native = self._client.get(_to_native_key(self._client, key))
        except _api_errors() as e:
            raise StoreReadError(f"get {key}: {e}") from e
        if native is None:
            raise EntityNotFoundError(f"No entity stored under {key}")
        return _from_properties(dict(native))

    def delete(self, key: Key) -> None:
        """Remove the entity stored under key.

        Raises:
            StoreWriteError: If the delete fails.
        """
        try:
            self._client.delete(_to_native_key(self._client, key))
        except _api_errors() as e:
            raise StoreWriteError(f"delete {key}: {e}") from e

    def count(self, query: Query) -> int:
        """Count entities matching query with a server-side aggregation.

        Raises:
            StoreQueryError: If the query fails.
        """
        from google.cloud.datastore.query import PropertyFilter

        native = self._client.query(kind=query.kind)
        for prop, value in query.filters:
            native.add_filter(filter=PropertyFilter(prop, "=", value))
        aggregation = self._client.aggregation_query(native).count(alias="total")
        try:
            batches = list(aggregation.fetch())
        except _api_errors() as e:
            raise StoreQueryError(f"count {query.kind}: {e}") from e
        return sum(int(result.value) for batch in batches for result in batch)

    def allocate_id(self, kind: str) -> int:
        """Reserve a fresh integer ID for kind.

        Raises:
            AllocationError: If the allocation call fails.
        """
        try:
            allocated = self._client.allocate_ids(self._client.key(kind), 1)
        except _api_errors() as e:
            raise AllocationError(f"allocate_ids {kind}: {e}") from e
        return int(allocated[0].id)
