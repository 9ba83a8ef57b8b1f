"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from dataclasses import dataclass

from dskit import Context, DatastoreSettings, Key, LocalDatastore, Query, entity
from dskit.errors import AllocationError, StoreQueryError, StoreReadError, StoreWriteError


@entity
@dataclass
class FixtureAccount:
    id: int = 0
    key: Key | None = None
    name: str = ""


class FailingDatastore(LocalDatastore):
    """LocalDatastore whose individual operations can be switched to fail."""

    def __init__(self, *failing: str):
        super().__init__()
        self.failing = set(failing)
        self.calls: list[tuple[str, object]] = []

    def put(self, key, entity):
        self.calls.append(("put", key))
        if "put" in self.failing:
            raise StoreWriteError("put refused")
        return super().put(key, entity)

    def get(self, key):
        self.calls.append(("get", key))
        if "get" in self.failing:
            raise StoreReadError("backend unavailable")
        return super().get(key)

    def count(self, query: Query) -> int:
        self.calls.append(("count", query))
        if "count" in self.failing:
            raise StoreQueryError("query refused")
        return super().count(query)

    def allocate_id(self, kind: str) -> int:
        self.calls.append(("allocate_id", kind))
        if "allocate_id" in self.failing:
            raise AllocationError("allocator down")
        return super().allocate_id(kind)

    def called(self, operation: str) -> bool:
        return any(op == operation for op, _ in self.calls)


@pytest.fixture
def settings():
    """Default settings, isolated from DSKIT_* environment variables."""
    return DatastoreSettings(_env_file=None)


@pytest.fixture
def store():
    """Fresh LocalDatastore instance."""
    return LocalDatastore()


@pytest.fixture
def ctx(store, settings):
    """Context over the fresh store."""
    return Context.create(store, request_id="test-req", settings=settings)


@pytest.fixture
def failing_store():
    """Factory for a FailingDatastore with the given operations broken."""
    return FailingDatastore


@pytest.fixture
def account_cls():
    return FixtureAccount
