"""Structured logging helpers shared by the capture pipeline."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .urls import Target

UTC = getattr(datetime, "UTC", timezone.utc)
_LOGGER_NAME = "blurshot"
_configured = False
_base_context: dict[str, Any] = {}
# Concurrent targets each run in their own task, so scoped context lives in a
# ContextVar rather than a shared stack.
_scoped_context: ContextVar[dict[str, Any]] = ContextVar("blurshot_log_context", default={})


def configure_logging(level: int = logging.INFO) -> None:
    """Configure the global logging formatter once."""

    global _configured
    if _configured:
        return
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")
    _configured = True


def set_global_context(**fields: Any) -> None:
    """Add persistent context fields that appear on every structured log."""

    _base_context.update({k: v for k, v in fields.items() if v is not None})


@contextmanager
def logging_context(**fields: Any) -> Iterator[None]:
    """Push a temporary logging context for the duration of the ``with`` block."""

    merged = {**_scoped_context.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _scoped_context.set(merged)
    try:
        yield
    finally:
        _scoped_context.reset(token)


def _merged_context() -> dict[str, Any]:
    return {**_base_context, **_scoped_context.get()}


def _utcnow_iso() -> str:
    return datetime.now(UTC).isoformat()


def jlog(level: str, /, **fields: Any) -> None:
    """Emit a structured JSON log payload under the ``blurshot`` logger."""

    log = logging.getLogger(_LOGGER_NAME)
    record = {"ts": _utcnow_iso(), **_merged_context(), **fields}
    getattr(log, level.lower())(json.dumps(record, ensure_ascii=False, sort_keys=True, default=str))


def targetlog(event: str, *, target: Target, level: str = "info", **kw: Any) -> None:
    """Shortcut for target-scoped JSON logging records."""

    jlog(level, event=event, index=target.number, url=target.url, domain=target.domain, **kw)


__all__ = ["configure_logging", "jlog", "logging_context", "set_global_context", "targetlog"]
