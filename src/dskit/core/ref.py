"""Reference wrapper for records held in a mutable slot.

The persistence engine unwraps a Ref exactly once, so callers can pass either
a record or a Ref to one.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Ref(Generic[T]):
    """Mutable holder for a record."""

    __slots__ = ("_target",)

    def __init__(self, target: T) -> None:
        self._target = target

    def unwrap(self) -> T:
        """Return the referenced record."""
        return self._target

    def __repr__(self) -> str:
        return f"Ref({self._target!r})"


def deref(value: Any | Ref[Any]) -> Any:
    """Unwrap one level of Ref, if present."""
    if isinstance(value, Ref):
        return value.unwrap()
    return value
