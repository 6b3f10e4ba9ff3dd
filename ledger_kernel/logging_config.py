"""
ledger_kernel.logging_config -- JSON log lines for the ledger packages.

Responsibility:
    Render every record under the ``ledger_kernel`` logger namespace as a
    single JSON object carrying:
      - ts, level, logger, message
      - the request context bound through ``LogContext.bind``
        (``account_id`` while a report is built, ``currency`` while one
        currency is reconstructed)
      - the record's ``extra`` fields (``error_code``, ``engine_name``, ...)
      - for ``LedgerKernelError`` exceptions, ``exc_code`` plus one
        ``exc_<attr>`` entry per structured attribute

Architecture position:
    Kernel -- imported by engines, config and services; imports nothing
    above the kernel.

Failure modes:
    Values json cannot encode are rendered with ``str``; Decimal keeps
    plain (non-scientific) notation.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from ledger_kernel.exceptions import LedgerKernelError

__all__ = [
    "LOGGER_NAMESPACE",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

LOGGER_NAMESPACE = "ledger_kernel"

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"ledger_log_{name}", default=None)
    for name in ("account_id", "currency")
}


class LogContext:
    """Request-scoped fields stamped onto every record emitted while bound."""

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """Bind fields for the duration of the block; None values are skipped."""
        unknown = set(fields) - set(_CONTEXT_VARS)
        if unknown:
            raise ValueError(f"unknown log context fields: {sorted(unknown)}")

        tokens = [
            (_CONTEXT_VARS[name], _CONTEXT_VARS[name].set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)

    @staticmethod
    def current() -> dict[str, str]:
        return {
            name: value
            for name, var in _CONTEXT_VARS.items()
            if (value := var.get()) is not None
        }


# Attributes every LogRecord has; anything else on a record came from ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> str:
    if isinstance(value, Decimal):
        return f"{value:f}"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {"exc_type": type(exc).__name__, "exc_message": str(exc)}
    if isinstance(exc, LedgerKernelError):
        fields["exc_code"] = exc.code
        fields.update(
            (f"exc_{attr}", value)
            for attr, value in vars(exc).items()
            if not attr.startswith("_")
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
            **LogContext.current(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger ``ledger_kernel.<name>``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_setup_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    handler: logging.Handler | None = None,
) -> logging.Handler:
    """
    Install one JSON handler on the ledger namespace.

    Only the first call installs; later calls return the installed handler
    unchanged. Defaults to a stderr stream handler.
    """
    global _installed_handler
    with _setup_lock:
        if _installed_handler is not None:
            return _installed_handler

        namespace = logging.getLogger(LOGGER_NAMESPACE)
        installed = handler if handler is not None else logging.StreamHandler()
        installed.setFormatter(StructuredFormatter())
        namespace.addHandler(installed)
        namespace.setLevel(level)
        namespace.propagate = False
        _installed_handler = installed
        return installed


def reset_logging() -> None:
    """Remove the installed handler and restore propagation. Test use only."""
    global _installed_handler
    with _setup_lock:
        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.handlers.clear()
        namespace.setLevel(logging.WARNING)
        namespace.propagate = True
        _installed_handler = None
