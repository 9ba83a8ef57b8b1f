"""Core functionalities: stateless primitives.

Architecture Note:
    core/ holds pure helpers with no store access: keys, kinds, slugs,
    field introspection and hook protocols. Anything that talks to a
    datastore lives in storage/ and persistence/.
"""

from dskit.core.fields import field_names, is_empty, is_record, iter_fields, update
from dskit.core.hooks import AfterSave, BeforeSave
from dskit.core.identity import Key
from dskit.core.kind import KindRegistry, entity, get_registry, kind_of
from dskit.core.ref import Ref, deref
from dskit.core.response import ApiResponse
from dskit.core.slug import generate_slug, in_chain

__all__ = [
    # Identity
    "Key",
    # Kind
    "entity",
    "kind_of",
    "get_registry",
    "KindRegistry",
    # Fields
    "is_empty",
    "is_record",
    "field_names",
    "iter_fields",
    "update",
    # Hooks
    "BeforeSave",
    "AfterSave",
    # Ref
    "Ref",
    "deref",
    # Slug
    "generate_slug",
    "in_chain",
    # Response
    "ApiResponse",
]
