"""Datastore protocol for swappable backends.

The storage layer abstracts the key-value document store, enabling:
- Local in-memory (tests, development)
- Google Cloud Datastore (see dskit.adapters.cloud_datastore)

Usage:
    store = LocalDatastore()
    ctx = Context.create(store)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from dskit.core.identity import Key


@dataclass(frozen=True)
class Query:
    """Equality-filtered query over one kind.

    Immutable - filter() returns a new Query instance.
    """

    kind: str
    filters: tuple[tuple[str, Any], ...] = ()

    def filter(self, prop: str, value: Any) -> Query:
        """Entities must also have prop == value."""
        return Query(self.kind, self.filters + ((prop, value),))

    def matches(self, properties: dict[str, Any]) -> bool:
        """Check if a stored property dict satisfies every filter."""
        return all(prop in properties and properties[prop] == value for prop, value in self.filters)


@runtime_checkable
class Datastore(Protocol):
    """Abstract store interface. Implementations handle actual data.

    Backends translate their native failures into dskit.errors.StoreError
    subclasses.
    """

    def put(self, key: Key, entity: Any) -> Key:
        """Write entity under key. Returns the complete key.

        Incomplete keys are completed with a store-assigned ID.

        Raises:
            StoreWriteError: If the write fails.
        """
        ...

    def get(self, key: Key) -> Any:
        """Read the entity stored under key.

        Raises:
            EntityNotFoundError: If nothing is stored under key.
            StoreReadError: If the read fails.
        """
        ...

    def delete(self, key: Key) -> None:
        """Remove the entity stored under key. Missing keys are ignored.

        Raises:
            StoreWriteError: If the delete fails.
        """
        ...

    def count(self, query: Query) -> int:
        """Count entities matching query.

        Raises:
            StoreQueryError: If the query fails.
        """
        ...

    def allocate_id(self, kind: str) -> int:
        """Reserve a fresh integer ID for kind.

        Raises:
            AllocationError: If no ID could be reserved.
        """
        ...
