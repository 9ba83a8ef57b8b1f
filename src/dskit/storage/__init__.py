"""Storage backends."""

from dskit.storage.allocator import IdAllocator
from dskit.storage.local import LocalDatastore
from dskit.storage.protocol import Datastore, Query

__all__ = [
    "Datastore",
    "Query",
    "IdAllocator",
    "LocalDatastore",
]
