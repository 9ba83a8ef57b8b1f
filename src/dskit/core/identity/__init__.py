"""Entity identity: store keys."""

from dskit.core.identity.models import Key

__all__ = [
    "Key",
]
