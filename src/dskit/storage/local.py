"""Local in-memory datastore implementation.

Simple dict-based storage suitable for single-process use and testing.

Usage:
    store = LocalDatastore()
    ctx = Context.create(store)
    key = save(ctx, Account(name="ann"))
"""

from __future__ import annotations

import copy as cp
from typing import Any

from dskit.core.fields import is_record, iter_fields
from dskit.core.identity import Key
from dskit.errors import AllocationError, EntityNotFoundError, StoreWriteError
from dskit.storage.allocator import IdAllocator
from dskit.storage.protocol import Query


def _properties(entity: Any) -> dict[str, Any]:
    """Indexed properties of an entity, used for query matching."""
    if isinstance(entity, dict):
        return dict(entity)
    if is_record(entity):
        return dict(iter_fields(entity))
    raise StoreWriteError(f"Cannot store {type(entity).__name__}: not a record or dict")


class LocalDatastore:
    """In-memory store keyed by complete Key.

    Structure:
        _entities[key] = (deep copy of entity, property dict)

    Entities are copied on the way in and on the way out, so callers never
    share state with the store.

    Args:
        allocator: ID allocator used for incomplete keys and allocate_id().
    """

    def __init__(self, allocator: IdAllocator | None = None):
        """Initialize local datastore.

        Args:
            allocator: ID allocator (default: a fresh IdAllocator).
        """
        self._allocator = allocator or IdAllocator()
        self._entities: dict[Key, tuple[Any, dict[str, Any]]] = {}

    def put(self, key: Key, entity: Any) -> Key:
        """Write a copy of entity under key.

        Args:
            key: Target key. Incomplete keys get a freshly allocated ID.
            entity: Record or dict to store.

        Returns:
            The complete key the entity was written under.

        Raises:
            StoreWriteError: If the entity is not storable or allocation fails.
        """
        stored = cp.deepcopy(entity)
        properties = _properties(stored)
        if not key.is_complete:
            try:
                key = key.complete(self._allocator.allocate(key.kind))
            except AllocationError as e:
                raise StoreWriteError(f"Cannot complete {key}: {e}") from e
        elif key.int_id is not None:
            self._allocator.reserve(key.kind, key.int_id)
        self._entities[key] = (stored, properties)
        return key

    def get(self, key: Key) -> Any:
        """Read a copy of the entity stored under key.

        Raises:
            EntityNotFoundError: If nothing is stored under key.
        """
        stored = self._entities.get(key)
        if stored is None:
            raise EntityNotFoundError(f"No entity stored under {key}")
        return cp.deepcopy(stored[0])

    def delete(self, key: Key) -> None:
        """Remove the entity stored under key, if any."""
        self._entities.pop(key, None)

    def count(self, query: Query) -> int:
        """Count entities of query.kind matching every equality filter."""
        return sum(
            1
            for key, (_, properties) in self._entities.items()
            if key.kind == query.kind and query.matches(properties)
        )

    def allocate_id(self, kind: str) -> int:
        """Reserve a fresh integer ID for kind.

        Raises:
            AllocationError: If the allocator's ID space is exhausted.
        """
        return self._allocator.allocate(kind)

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, key: object) -> bool:
        return key in self._entities
