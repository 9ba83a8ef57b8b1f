"""Unique slug resolution against the store.

Usage:
    slug = generate_unique_slug(ctx, Post, "Hello World")  # "hello-world", or "hello-world-2", ...
"""

from __future__ import annotations

from dskit.context import Context
from dskit.core.kind import kind_of
from dskit.core.slug import generate_slug
from dskit.errors import StoreError
from dskit.storage.protocol import Query


def _taken(ctx: Context, kind: str, slug: str) -> int:
    return ctx.datastore.count(Query(kind).filter(ctx.settings.slug_field, slug))


def generate_unique_slug(ctx: Context, kind: str | type, text: str) -> str:
    """Generate a slug that no stored entity of kind uses yet.

    Tries the plain slug first, then ``slug-2``, ``slug-3`` and so on until a
    count query reports no match. Nothing is reserved: a concurrent caller
    can observe the same slug as free.

    Args:
        ctx: Operation context.
        kind: Kind name, or an entity type to resolve it from.
        text: Free-form text to slugify.

    Returns:
        The unique slug, or "" if a count query failed (the error is logged).
    """
    kind = kind_of(kind)
    base = generate_slug(text)
    slug = base
    counter = ctx.settings.slug_suffix_start
    try:
        while _taken(ctx, kind, slug) > 0:
            slug = f"{base}-{counter}"
            counter += 1
    except StoreError as e:
        ctx.error("[slugs/generate_unique_slug] %s", e)
        return ""
    return slug
