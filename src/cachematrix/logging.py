"""Structured JSON logging for cache events.

Records are emitted as a single JSON string so they can be filtered by
``event`` (``cache_hit``, ``cache_miss``, ``inverse_failed``).  The decoded
payload is also attached to the record as ``record.structured``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .errors import CacheMatrixError, record_error, summarize_context, summarize_value


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that serialises records as JSON strings."""

    def process(self, msg: Any, kwargs: Mapping[str, Any]):  # type: ignore[override]
        context = dict(self.extra or {})
        context.update(kwargs.pop("context", None) or {})
        payload = dict(msg) if isinstance(msg, Mapping) else {"message": str(msg)}
        summarized = summarize_context(context)
        if summarized:
            payload.setdefault("context", {}).update(summarized)
        payload.setdefault("logger", self.logger.name)
        payload.setdefault(
            "timestamp",
            datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        )
        kwargs.setdefault("extra", {})["structured"] = payload
        return json.dumps(payload, default=summarize_value), dict(kwargs)

    def event(
        self,
        level: int,
        name: str,
        message: Optional[str] = None,
        **context: Any,
    ) -> None:
        """Log the named event with ``context`` merged into the bound context."""

        self.log(level, {"event": name, "message": message or name}, context=context)


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """Return a structured logger adapter bound to ``name``."""

    return StructuredLoggerAdapter(logging.getLogger(name), context)


def log_exception(
    logger: StructuredLoggerAdapter,
    error: CacheMatrixError,
    *,
    event: str,
    context: Mapping[str, Any] | None = None,
) -> None:
    """Log ``error`` at ERROR level under ``event`` and count it in the error metrics."""

    combined: dict[str, Any] = dict(context or {})
    combined.update(error.context)
    record_error(error)
    logger.log(
        logging.ERROR,
        {"event": event, "message": error.user_message, "error": error.to_dict()},
        context=combined,
    )


__all__ = ["StructuredLoggerAdapter", "get_logger", "log_exception"]
