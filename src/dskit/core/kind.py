"""Kind registry and entity decorator.

The kind is the collection name an entity type is stored under. Types can
declare it explicitly; otherwise the unqualified type name is used.

Usage:
    @entity(kind="BlogPost")
    @dataclass
    class Post:
        id: int = 0
        title: str = ""

    @entity
    @dataclass
    class Account:
        id: int = 0

    kind_of(Post)       # "BlogPost"
    kind_of(Account())  # "Account"
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar, overload

T = TypeVar("T")

KIND_ATTRIBUTE = "__kind__"


def _strip_qualifier(type_name: str) -> str:
    """Drop everything up to and including the last '.'."""
    return type_name.rsplit(".", 1)[-1]


class KindRegistry:
    """Process-local mapping from entity types to kind names.

    A type's kind is computed on first lookup and never changes afterwards.
    """

    def __init__(self) -> None:
        self._by_type: dict[type, str] = {}
        self._by_kind: dict[str, type] = {}

    def register(self, cls: type, kind: str | None = None) -> str:
        """Register an entity type and return its kind.

        Args:
            cls: Entity class to register.
            kind: Explicit kind name. Defaults to the declared ``__kind__``
                attribute, then to the unqualified class name.

        Returns:
            The kind name the type is stored under.

        Raises:
            RuntimeError: If the type is already registered under a different kind.
        """
        resolved = kind or self._declared_kind(cls)
        existing = self._by_type.get(cls)
        if existing is not None:
            if existing != resolved:
                raise RuntimeError(
                    f"{cls.__qualname__} is already registered as kind {existing!r}"
                )
            return existing

        self._by_type[cls] = resolved
        self._by_kind.setdefault(resolved, cls)
        return resolved

    @staticmethod
    def _declared_kind(cls: type) -> str:
        # Subclasses do not inherit their parent's kind
        declared = vars(cls).get(KIND_ATTRIBUTE)
        if isinstance(declared, str) and declared:
            return declared
        return _strip_qualifier(cls.__qualname__)

    def kind_of(self, cls: type) -> str:
        """Get the kind of a type, registering it on first use."""
        kind = self._by_type.get(cls)
        if kind is None:
            kind = self.register(cls)
        return kind

    def get_type(self, kind: str) -> type | None:
        """Get the first type registered under a kind, if any."""
        return self._by_kind.get(kind)

    def is_registered(self, cls: type) -> bool:
        return cls in self._by_type


# Module-level registry instance
_registry = KindRegistry()


def get_registry() -> KindRegistry:
    """Access the global kind registry.

    Returns:
        The process-local KindRegistry instance.
    """
    return _registry


def kind_of(entity_or_type: Any) -> str:
    """Resolve the kind of an entity instance or entity type.

    Args:
        entity_or_type: Entity class, entity instance, or a kind name string.

    Returns:
        Kind name. Strings are returned unchanged.
    """
    if isinstance(entity_or_type, str):
        return entity_or_type
    cls = entity_or_type if isinstance(entity_or_type, type) else type(entity_or_type)
    return _registry.kind_of(cls)


@overload
def entity(cls: type[T], /) -> type[T]: ...


@overload
def entity(*, kind: str | None = None) -> Callable[[type[T]], type[T]]: ...


def entity(
    cls: type[T] | None = None,
    *,
    kind: str | None = None,
) -> type[T] | Callable[[type[T]], type[T]]:
    """Declare a class as a storable entity.

    Can be used with or without arguments:
        @entity
        @dataclass
        class Account: ...

        @entity(kind="Member")
        @dataclass
        class Account: ...

    Args:
        cls: The class to decorate (when used without parentheses).
        kind: Explicit kind name for the store.

    Returns:
        The same class, with ``__kind__`` set and registered.
    """

    def decorator(cls: type[T]) -> type[T]:
        resolved = _registry.register(cls, kind)
        setattr(cls, KIND_ATTRIBUTE, resolved)
        return cls

    if cls is not None:
        return decorator(cls)
    return decorator
