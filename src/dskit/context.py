"""Operation context passed to every store-facing call.

Bundles the datastore handle, a request-scoped logger and settings.

Usage:
    ctx = Context.create(LocalDatastore(), request_id="req-42")
    ctx.error("[module/function] something failed")
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any

from dskit.config import DatastoreSettings
from dskit.storage.protocol import Datastore

_logger = logging.getLogger("dskit")


class RequestLogger(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Logger adapter that tags every record with the request ID."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return f"[{extra.get('request_id', '-')}] {msg}", kwargs


@dataclass
class Context:
    """Request-scoped handle for store calls and logging.

    Attributes:
        datastore: Backend every store call goes through.
        logger: Request-scoped logger.
        settings: Field-name and backend configuration.
    """

    datastore: Datastore
    logger: logging.Logger | logging.LoggerAdapter = field(default=_logger)  # type: ignore[type-arg]
    settings: DatastoreSettings = field(default_factory=DatastoreSettings)

    @classmethod
    def create(
        cls,
        datastore: Datastore,
        request_id: str | None = None,
        settings: DatastoreSettings | None = None,
    ) -> Context:
        """Build a context with a logger bound to request_id.

        Args:
            datastore: Backend to use.
            request_id: Request identifier for log records (default: random hex).
            settings: Settings (default: loaded from the environment).

        Returns:
            New Context.
        """
        request_logger = RequestLogger(_logger, {"request_id": request_id or uuid.uuid4().hex[:12]})
        return cls(
            datastore=datastore,
            logger=request_logger,
            settings=settings if settings is not None else DatastoreSettings(),
        )

    @property
    def request_id(self) -> str | None:
        if isinstance(self.logger, logging.LoggerAdapter) and self.logger.extra:
            return self.logger.extra.get("request_id")  # type: ignore[no-any-return]
        return None

    def error(self, msg: str, *args: Any) -> None:
        self.logger.error(msg, *args)

    def warning(self, msg: str, *args: Any) -> None:
        self.logger.warning(msg, *args)

    def exception(self, msg: str, *args: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        self.logger.exception(msg, *args)
