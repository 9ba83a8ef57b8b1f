"""Store-facing operations: record persistence and unique slugs."""

from dskit.persistence.engine import delete, exists_in_datastore, load, save
from dskit.persistence.slugs import generate_unique_slug

__all__ = [
    "save",
    "load",
    "delete",
    "exists_in_datastore",
    "generate_unique_slug",
]
