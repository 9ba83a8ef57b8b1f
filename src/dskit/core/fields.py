"""Record field introspection: emptiness and partial merge.

A record is a dataclass instance or a Pydantic model instance. Fields are
always matched by declared name, never by position.

Usage:
    @dataclass
    class Profile:
        name: str = ""
        age: int = 0

    is_empty(Profile())                  # True
    dst, src = Profile("Ann", 30), Profile(age=31)
    update(dst, src)                     # True, dst == Profile("Ann", 31)
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, TypeVar

from pydantic import BaseModel

from dskit.errors import InvalidArgumentError

T = TypeVar("T")

_NUMERIC = (int, float, complex, Decimal, Fraction)


def _is_pydantic_model(cls: type[Any]) -> bool:
    """Check if class is a Pydantic model."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def is_record(value: Any) -> bool:
    """Check if value is a record instance (not a record class)."""
    if isinstance(value, type):
        return False
    return dataclasses.is_dataclass(value) or _is_pydantic_model(type(value))


def field_names(record: Any) -> tuple[str, ...]:
    """Declared field names of a record, in declaration order.

    Raises:
        InvalidArgumentError: If record is not a dataclass or Pydantic model instance.
    """
    if not is_record(record):
        raise InvalidArgumentError(
            f"Expected a dataclass or Pydantic model instance, got {type(record).__name__}"
        )
    if dataclasses.is_dataclass(record):
        return tuple(f.name for f in dataclasses.fields(record))
    return tuple(type(record).model_fields)


def iter_fields(record: Any) -> Iterator[tuple[str, Any]]:
    """Yield (name, value) pairs for each declared field of a record."""
    for name in field_names(record):
        yield name, getattr(record, name)


def has_field(record: Any, name: str) -> bool:
    return name in field_names(record)


def _is_frozen(record: Any) -> bool:
    """Check if record rejects attribute assignment."""
    if dataclasses.is_dataclass(record):
        return bool(type(record).__dataclass_params__.frozen)  # type: ignore[attr-defined]
    if _is_pydantic_model(type(record)):
        return bool(type(record).model_config.get("frozen"))
    return False


def is_empty(value: Any) -> bool:
    """Check whether a value is the zero value of its type.

    Rules:
        - bool and Enum members are never empty
        - numbers are empty when equal to 0
        - str and bytes are empty when zero-length
        - None is empty
        - records are empty when every field is empty (recursive)
        - anything else (containers, callables, handles) is empty only when
          unset, so a present container is never empty, whatever it holds

    Args:
        value: Any value.

    Returns:
        True if value is its type's zero value.
    """
    if value is None:
        return True
    if isinstance(value, bool | Enum):
        return False
    if isinstance(value, _NUMERIC):
        return value == 0
    if isinstance(value, str | bytes):
        return len(value) == 0
    if is_record(value):
        return all(is_empty(v) for _, v in iter_fields(value))
    return False


def update(dst: T, src: T) -> bool:
    """Copy every non-empty field of src onto dst.

    Both records must be of the same concrete type, and that type must allow
    assignment.

    Args:
        dst: Record to modify in place.
        src: Record supplying new values.

    Returns:
        True if at least one field was copied.

    Raises:
        InvalidArgumentError: If either argument is not a record, the types
            differ, or the record type is frozen.
    """
    if type(dst) is not type(src):
        raise InvalidArgumentError(
            f"Cannot update {type(dst).__name__} from {type(src).__name__}"
        )
    if _is_frozen(dst):
        raise InvalidArgumentError(f"Cannot update frozen {type(dst).__name__}")

    changed = False
    for name, value in iter_fields(src):
        if is_empty(value):
            continue
        setattr(dst, name, value)
        changed = True
    return changed
