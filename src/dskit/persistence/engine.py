"""Persistence engine: save, load, existence checks and deletes for records.

Identity of a record is resolved in priority order:
    1. its key attribute, if it holds a Key
    2. its id attribute, if it holds a non-zero int
    3. a freshly allocated ID (save only)

Attribute names come from ctx.settings (key_field, id_field).

Usage:
    @entity
    @dataclass
    class Account:
        id: int = 0
        key: Key | None = None
        name: str = ""

    ctx = Context.create(LocalDatastore())
    account = Account(name="ann")
    key = save(ctx, account)       # account.id and account.key are now set
    exists_in_datastore(ctx, account)  # True
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from dskit.context import Context
from dskit.core.fields import has_field, is_record
from dskit.core.hooks import AfterSave, BeforeSave
from dskit.core.identity import Key
from dskit.core.kind import kind_of
from dskit.core.ref import deref
from dskit.errors import InvalidArgumentError, StoreError, StoreWriteError

T = TypeVar("T")


def _record(entity: Any) -> Any:
    """Unwrap one Ref level and check the result is a record."""
    record = deref(entity)
    if not is_record(record):
        raise InvalidArgumentError(
            f"Must pass a dataclass or Pydantic model instance, got {type(record).__name__}"
        )
    return record


def _existing_key(ctx: Context, record: Any, kind: str) -> Key | None:
    """Key from the record's key attribute, else from a non-zero id attribute."""
    settings = ctx.settings
    if has_field(record, settings.key_field):
        key = getattr(record, settings.key_field)
        if isinstance(key, Key):
            return key
    if has_field(record, settings.id_field):
        record_id = getattr(record, settings.id_field)
        if isinstance(record_id, int) and not isinstance(record_id, bool) and record_id != 0:
            return Key(kind, record_id)
    return None


def _allocated_key(ctx: Context, record: Any, kind: str) -> Key:
    """Allocate a new ID for record, falling back to an incomplete key.

    Allocation failures are logged and masked; the store then assigns the ID
    on write.
    """
    try:
        new_id = ctx.datastore.allocate_id(kind)
    except StoreError as e:
        ctx.warning("[engine/save] ID allocation for %s failed, using incomplete key: %s", kind, e)
        return Key.incomplete(kind)

    if has_field(record, ctx.settings.id_field):
        setattr(record, ctx.settings.id_field, new_id)
    return Key(kind, new_id)


def _set_identity(ctx: Context, record: Any, key: Key) -> None:
    """Write key (and its integer ID, if any) back into the record."""
    settings = ctx.settings
    if has_field(record, settings.key_field):
        setattr(record, settings.key_field, key)
    if has_field(record, settings.id_field) and key.int_id is not None:
        setattr(record, settings.id_field, key.int_id)


def save(ctx: Context, entity: Any) -> Key:
    """Write a record to the store, resolving or allocating its key.

    Runs ``before_save(ctx)`` first if the record defines it, and
    ``after_save(ctx, key)`` after a successful write. Hook exceptions are
    logged and swallowed.

    Args:
        ctx: Operation context.
        entity: Record, or a Ref to one.

    Returns:
        The key the record was written under.

    Raises:
        InvalidArgumentError: If entity is not a record.
        StoreWriteError: If the store rejects the write. Key and ID
            attributes keep the values identity resolution gave them.
    """
    record = _record(entity)
    kind = kind_of(record)

    if isinstance(record, BeforeSave):
        try:
            record.before_save(ctx)
        except Exception:
            ctx.exception("[engine/save] before_save hook of %s raised", kind)

    key = _existing_key(ctx, record, kind)
    if key is None:
        key = _allocated_key(ctx, record, kind)

    try:
        key = ctx.datastore.put(key, record)
    except StoreWriteError as e:
        ctx.error("[engine/save]: %s", e)
        raise
    except StoreError as e:
        ctx.error("[engine/save]: %s", e)
        raise StoreWriteError(f"Failed to save {key}: {e}") from e

    _set_identity(ctx, record, key)

    if isinstance(record, AfterSave):
        try:
            record.after_save(ctx, key)
        except Exception:
            ctx.exception("[engine/save] after_save hook of %s raised", kind)
    return key


def exists_in_datastore(ctx: Context, entity: Any) -> bool:
    """Check whether a record is stored under its current identity.

    Records without a key and without a non-zero ID are reported as missing
    without touching the store. Store errors of any kind read as False.

    Raises:
        InvalidArgumentError: If entity is not a record.
    """
    record = _record(entity)
    key = _existing_key(ctx, record, kind_of(record))
    if key is None:
        return False
    try:
        ctx.datastore.get(key)
    except StoreError:
        return False
    return True


def load(ctx: Context, entity_type: type[T], key: Key) -> T:
    """Fetch the record stored under key and set its identity attributes.

    Args:
        ctx: Operation context.
        entity_type: Expected record type.
        key: Key to read.

    Returns:
        The stored record.

    Raises:
        EntityNotFoundError: If nothing is stored under key.
        StoreReadError: If the read fails.
        InvalidArgumentError: If the stored value is not an entity_type record
            or its properties cannot be rebuilt into one.
    """
    stored = ctx.datastore.get(key)
    if isinstance(stored, dict):
        stored = _from_properties(entity_type, stored)
    if not isinstance(stored, entity_type):
        raise InvalidArgumentError(
            f"{key} holds {type(stored).__name__}, expected {entity_type.__name__}"
        )
    _set_identity(ctx, stored, key)
    return stored


def _from_properties(entity_type: type[T], properties: dict[str, Any]) -> T:
    """Build a record from a property dict returned by a remote backend.

    Nested records and enums are rebuilt from their decoded JSON form.
    Unknown properties are ignored.

    Raises:
        InvalidArgumentError: If the properties do not fit entity_type.
    """
    try:
        return TypeAdapter(entity_type).validate_python(properties)
    except ValidationError as e:
        raise InvalidArgumentError(
            f"Stored properties do not fit {entity_type.__name__}: {e}"
        ) from e


def delete(ctx: Context, entity: Any) -> bool:
    """Remove a record from the store by its current identity.

    Returns:
        True if a delete was issued and succeeded, False if the record has no
        identity or the store call failed.

    Raises:
        InvalidArgumentError: If entity is not a record.
    """
    record = _record(entity)
    key = _existing_key(ctx, record, kind_of(record))
    if key is None:
        return False
    try:
        ctx.datastore.delete(key)
    except StoreError as e:
        ctx.error("[engine/delete]: %s", e)
        return False
    return True
