"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support.

Usage:
    from dskit.config import DatastoreSettings

    # Load from environment variables (DSKIT_*)
    settings = DatastoreSettings()

    # Or override with explicit values
    settings = DatastoreSettings(slug_field="Slug", id_field="ID", key_field="Key")
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatastoreSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for the persistence helpers and store adapters.

    Attributes:
        key_field: Record attribute holding the store key.
        id_field: Record attribute holding the integer ID.
        slug_field: Stored property compared by unique slug checks.
        slug_suffix_start: First numeric suffix tried on slug collisions.
        project: Cloud project ID (None lets the client infer it).
        namespace: Store namespace.
        database: Named database (None for the default database).
        emulator_host: host:port of a local datastore emulator.

    Environment Variables:
        DSKIT_KEY_FIELD
        DSKIT_ID_FIELD
        DSKIT_SLUG_FIELD
        DSKIT_SLUG_SUFFIX_START
        DSKIT_PROJECT
        DSKIT_NAMESPACE
        DSKIT_DATABASE
        DSKIT_EMULATOR_HOST
    """

    model_config = SettingsConfigDict(
        env_prefix="DSKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    key_field: str = "key"
    id_field: str = "id"
    slug_field: str = "slug"
    slug_suffix_start: int = Field(default=2, ge=1)
    project: str | None = None
    namespace: str | None = None
    database: str | None = None
    emulator_host: str | None = None
