"""Exception hierarchy.

Only InvalidArgumentError and StoreWriteError escape the persistence engine.
Everything else is caught at the library boundary and reported through the
operation context's logger.
"""


class DskitError(Exception):
    """Base class for all dskit errors."""

    pass


class InvalidArgumentError(DskitError, TypeError):
    """Raised when a caller passes something that is not a record."""

    pass


class StoreError(DskitError):
    """Raised by datastore backends when a store call fails."""

    pass


class StoreWriteError(StoreError):
    """Put or delete failed."""

    pass


class StoreReadError(StoreError):
    """Get failed."""

    pass


class EntityNotFoundError(StoreReadError):
    """No entity is stored under the requested key."""

    pass


class StoreQueryError(StoreError):
    """Count query failed."""

    pass


class AllocationError(StoreError):
    """The store could not hand out a fresh integer ID."""

    pass
