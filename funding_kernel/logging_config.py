"""
Structured JSON logging for the funding calculator.

Every logger lives under the ``funding_kernel`` namespace and, once
``configure_logging()`` has run, writes one JSON object per line:

    {"ts": ..., "level": ..., "logger": ..., "message": ...,
     <context fields>, <extra fields>, <exception fields>}

Context fields (scenario, nursery, band, funding year, correlation id)
come from ``LogContext`` and are attached to every record emitted while
they are set, so engines never thread them through their signatures.
"""

__all__ = [
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
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"funding_log_{name}", default=None)
    for name in ("correlation_id", "scenario_id", "nursery_id", "band", "funding_year")
}


class LogContext:
    """
    Request-scoped log fields backed by ``contextvars``.

    Safe across threads and asyncio tasks.  Unknown field names passed to
    ``bind()`` are ignored.
    """

    FIELDS = tuple(_CONTEXT_VARS)

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        scenario_id: str | None = None,
        nursery_id: str | None = None,
        band: str | None = None,
        funding_year: str | None = None,
    ) -> None:
        """Update the given fields; ``None`` leaves a field untouched."""
        values = {
            "correlation_id": correlation_id,
            "scenario_id": scenario_id,
            "nursery_id": nursery_id,
            "band": band,
            "funding_year": funding_year,
        }
        for name, value in values.items():
            if value is not None:
                _CONTEXT_VARS[name].set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: value
            for name, var in _CONTEXT_VARS.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = [
            (_CONTEXT_VARS[name], _CONTEXT_VARS[name].set(value))
            for name, value in fields.items()
            if value is not None and name in _CONTEXT_VARS
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else arrived via ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # structured attributes of FundingKernelError subclasses (section, reason, ...)
    for name, value in vars(exc).items():
        if not name.startswith("_") and name not in ("args", "code"):
            fields[f"exc_{name}"] = value
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

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Logger factory and set-up
# ---------------------------------------------------------------------------

_ROOT_NAME = "funding_kernel"

_state_lock = threading.Lock()
_configured = False


def get_logger(name: str) -> logging.Logger:
    """``funding_kernel.<name>``; e.g. ``get_logger("engines.entitlement")``."""
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``funding_kernel`` logger.

    Only the first call after start-up (or after ``reset_logging()``) has
    any effect.  ``handler`` wins over ``stream``; with neither, records go
    to stderr.
    """
    global _configured
    with _state_lock:
        if _configured:
            return
        _configured = True

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())

    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(target)


def reset_logging() -> None:
    """Undo ``configure_logging()``.  Tests only."""
    global _configured
    with _state_lock:
        _configured = False
    root = logging.getLogger(_ROOT_NAME)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
