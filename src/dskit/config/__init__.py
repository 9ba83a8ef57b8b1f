"""Configuration module using Pydantic Settings.

Usage:
    from dskit.config import DatastoreSettings

    settings = DatastoreSettings(slug_field="Slug")
"""

from dskit.config.settings import DatastoreSettings

__all__ = [
    "DatastoreSettings",
]
