"""Lifecycle hook protocols.

Entities opt into hooks by defining the methods; no base class is needed.

Usage:
    @dataclass
    class Post:
        id: int = 0
        title: str = ""
        slug: str = ""

        def before_save(self, ctx: Context) -> None:
            if not self.slug:
                self.slug = generate_unique_slug(ctx, Post, self.title)

        def after_save(self, ctx: Context, key: Key) -> None:
            ctx.logger.info("saved %s", key)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dskit.context import Context
    from dskit.core.identity import Key


@runtime_checkable
class BeforeSave(Protocol):
    """Called before identity resolution, so it may set fields the key depends on."""

    def before_save(self, ctx: Context) -> None: ...


@runtime_checkable
class AfterSave(Protocol):
    """Called after a successful write with the final key."""

    def after_save(self, ctx: Context, key: Key) -> None: ...
