"""dskit: persistence helpers and unique slugs for key-value document stores.

Usage:
    from dataclasses import dataclass
    from dskit import Context, Key, LocalDatastore, entity, generate_unique_slug, save

    @entity
    @dataclass
    class Post:
        id: int = 0
        key: Key | None = None
        title: str = ""
        slug: str = ""

        def before_save(self, ctx):
            if not self.slug:
                self.slug = generate_unique_slug(ctx, Post, self.title)

    ctx = Context.create(LocalDatastore())
    post = Post(title="Hello World")
    save(ctx, post)  # post.id, post.key and post.slug are now set
"""

__version__ = "0.1.0"

# Configuration
from dskit.config import DatastoreSettings

# Context
from dskit.context import Context

# Core primitives
from dskit.core import (
    AfterSave,
    ApiResponse,
    BeforeSave,
    Key,
    Ref,
    entity,
    generate_slug,
    in_chain,
    is_empty,
    kind_of,
    update,
)

# Errors
from dskit.errors import (
    AllocationError,
    DskitError,
    EntityNotFoundError,
    InvalidArgumentError,
    StoreError,
    StoreQueryError,
    StoreReadError,
    StoreWriteError,
)

# Persistence
from dskit.persistence import (
    delete,
    exists_in_datastore,
    generate_unique_slug,
    load,
    save,
)

# Storage
from dskit.storage import (
    Datastore,
    LocalDatastore,
    Query,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Key",
    "Ref",
    "entity",
    "kind_of",
    "generate_slug",
    "in_chain",
    "is_empty",
    "update",
    "BeforeSave",
    "AfterSave",
    "ApiResponse",
    # Context and config
    "Context",
    "DatastoreSettings",
    # Persistence
    "save",
    "load",
    "delete",
    "exists_in_datastore",
    "generate_unique_slug",
    # Storage
    "Datastore",
    "LocalDatastore",
    "Query",
    # Errors
    "DskitError",
    "InvalidArgumentError",
    "StoreError",
    "StoreWriteError",
    "StoreReadError",
    "StoreQueryError",
    "EntityNotFoundError",
    "AllocationError",
]
