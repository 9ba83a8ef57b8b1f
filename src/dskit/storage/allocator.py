"""ID allocation service.

IdAllocator is a stateful service that hands out integer IDs per kind.
"""

from __future__ import annotations

from dskit.errors import AllocationError


class IdAllocator:
    """Allocates integer IDs, one monotonically increasing sequence per kind.

    IDs are never reused within a process. Allocation starts at ``start`` so
    that small hand-picked IDs stay free for fixtures.

    Args:
        start: First ID handed out for each kind (default 1).
        limit: Largest ID that may be handed out (default 2**63 - 1).
    """

    def __init__(self, start: int = 1, limit: int = 2**63 - 1):
        """Initialize the allocator.

        Args:
            start: First ID handed out for each kind (default 1).
            limit: Largest ID that may be handed out.

        Raises:
            ValueError: If start is not positive.
        """
        if start < 1:
            raise ValueError(f"start must be positive, got {start}")
        self._start = start
        self._limit = limit
        self._next: dict[str, int] = {}

    def allocate(self, kind: str) -> int:
        """Allocate the next ID for kind.

        Returns:
            Newly allocated ID.

        Raises:
            AllocationError: If the kind's ID space is exhausted.
        """
        next_id = self._next.get(kind, self._start)
        if next_id > self._limit:
            raise AllocationError(f"ID space exhausted for kind {kind!r}")
        self._next[kind] = next_id + 1
        return next_id

    def reserve(self, kind: str, used_id: int) -> None:
        """Mark used_id as taken so later allocations skip past it.

        Called when an entity is written under a caller-chosen ID.
        """
        if used_id >= self._next.get(kind, self._start):
            self._next[kind] = used_id + 1

