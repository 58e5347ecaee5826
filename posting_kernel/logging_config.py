"""
Structured JSON logging for the posting kernel.

Every record under the ``posting_kernel`` logger renders as one JSON line:
the envelope (ts, level, logger, message), then the resolution context
bound through LogContext, then any ``extra`` fields, then the exception
details when one is attached.  Kernel errors contribute their ``code`` and
their public attributes, so a failed resolution is searchable by tenant,
posting date or candidate count without parsing the message.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, TextIO
from uuid import UUID

from posting_kernel.exceptions import PostingKernelError

_ROOT = "posting_kernel"
_HANDLER_NAME = "posting_kernel.json"

# Rendered in this order, ahead of any extra fields.
CONTEXT_FIELDS = (
    "correlation_id",
    "tenant_id",
    "event_id",
    "rule_family",
    "rule_hash",
)

_EMPTY: MappingProxyType = MappingProxyType({})
_context: ContextVar[MappingProxyType] = ContextVar(
    "posting_kernel_log_context", default=_EMPTY
)


class LogContext:
    """Resolution-scoped log fields, isolated per thread and per task.

    Only the formatter reads these fields.  Kernel logic always receives the
    tenant and event as arguments.  Names outside CONTEXT_FIELDS and None
    values are ignored.
    """

    @staticmethod
    def _merged(fields: dict[str, str | None]) -> MappingProxyType:
        current = dict(_context.get())
        current.update(
            (name, str(value))
            for name, value in fields.items()
            if name in CONTEXT_FIELDS and value is not None
        )
        return MappingProxyType(current)

    @classmethod
    def set(cls, **fields: str | None) -> None:
        _context.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        current = _context.get()
        return {name: current[name] for name in CONTEXT_FIELDS if name in current}

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Layer fields over the current context for the ``with`` body."""
        token = _context.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _context.reset(token)


# Attributes every LogRecord carries; anything else came in through extra=.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    return repr(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    if isinstance(exc, PostingKernelError):
        fields["exc_code"] = exc.code
        fields.update(
            (f"exc_{name}", value)
            for name, value in vars(exc).items()
            if not name.startswith("_")
        )
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default, ensure_ascii=False)


def get_logger(name: str) -> logging.Logger:
    """Child of the ``posting_kernel`` logger, e.g. ``get_logger("domain.x")``."""
    return logging.getLogger(f"{_ROOT}.{name}")


_setup_lock = threading.Lock()


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(level.strip().upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return number


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach the JSON handler to the ``posting_kernel`` logger.

    Safe to call repeatedly: once the handler is attached, later calls change
    nothing.  ``level`` accepts a number or a name such as ``"DEBUG"``.
    """
    number = _level_number(level)
    root = logging.getLogger(_ROOT)
    with _setup_lock:
        if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
            return
        target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        target.set_name(_HANDLER_NAME)
        target.setFormatter(StructuredFormatter())
        root.addHandler(target)
        root.setLevel(number)
        root.propagate = False


def reset_logging() -> None:
    """Detach the JSON handler and restore logger defaults (used by tests)."""
    root = logging.getLogger(_ROOT)
    with _setup_lock:
        for h in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
            root.removeHandler(h)
        root.setLevel(logging.NOTSET)
        root.propagate = True
