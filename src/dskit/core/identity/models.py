"""Store key model.

Usage:
    key = Key("Account", 42)
    child = Key("Post", "hello-world", parent=key)
    pending = Key.incomplete("Post")
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Key:
    """Opaque reference to a stored entity.

    A key names its kind, an identifier (integer ID or string name), and an
    optional parent key. A key without an identifier is incomplete: the
    store assigns the identifier on write and returns the completed key.
    """

    kind: str
    id_or_name: int | str | None = None
    parent: Key | None = None

    def __post_init__(self) -> None:
        if not self.kind:
            raise ValueError("Key kind must be a non-empty string")
        if isinstance(self.id_or_name, bool):
            raise ValueError("Key identifier must be an int or str, not bool")
        if self.id_or_name == 0 or self.id_or_name == "":
            # Zero IDs and empty names mean "unset" in the store
            object.__setattr__(self, "id_or_name", None)

    @classmethod
    def incomplete(cls, kind: str, parent: Key | None = None) -> Key:
        """Build a key whose identifier will be assigned by the store."""
        return cls(kind, None, parent)

    @property
    def is_complete(self) -> bool:
        return self.id_or_name is not None

    @property
    def int_id(self) -> int | None:
        """Integer identifier, or None for named and incomplete keys."""
        return self.id_or_name if isinstance(self.id_or_name, int) else None

    @property
    def name(self) -> str | None:
        """String identifier, or None for numeric and incomplete keys."""
        return self.id_or_name if isinstance(self.id_or_name, str) else None

    def complete(self, id_or_name: int | str) -> Key:
        """Return a copy of this key with the identifier filled in.

        Raises:
            ValueError: If the key is already complete.
        """
        if self.is_complete:
            raise ValueError(f"{self} is already complete")
        return Key(self.kind, id_or_name, self.parent)

    def flat_path(self) -> tuple[str | int, ...]:
        """Flatten the ancestor chain into (kind, id, kind, id, ...).

        The trailing identifier is omitted for incomplete keys.
        """
        prefix = self.parent.flat_path() if self.parent is not None else ()
        if self.id_or_name is None:
            return (*prefix, self.kind)
        return (*prefix, self.kind, self.id_or_name)

    def __str__(self) -> str:
        return "/".join(str(part) for part in self.flat_path())
