"""
funding_engines.tracer -- ``@traced_engine`` and FUNDING_ENGINE_TRACE.

Responsibility:
    Wrap each public engine entry point so every call leaves one DEBUG
    record naming the engine, its version, a fingerprint of the inputs
    that matter and how long the call took.

Architecture position:
    Engines -- support code for the calculation modules.  Logging is the
    only side effect; arguments and results pass through untouched.

Invariants enforced:
    - The same inputs always give the same 16-hex fingerprint, whether
      passed by keyword or by position and whatever the order of any
      mapping inside them.

Failure modes:
    - A fingerprint field the call does not supply hashes as ``null``.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from funding_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "FUNDING_ENGINE_TRACE"


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        body = ",".join(
            f"{f.name}:{_canonical(getattr(value, f.name))}" for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}{{{body}}}"
    if isinstance(value, Mapping):
        pairs = sorted(f"{_canonical(k)}:{_canonical(v)}" for k, v in value.items())
        return "{" + ",".join(pairs) + "}"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(map(_canonical, value))) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(map(_canonical, value)) + "]"
    return str(value)


def compute_input_fingerprint(fingerprint_fields: tuple[str, ...], kwargs: Mapping[str, Any]) -> str:
    """First 16 hex chars of the SHA-256 of the selected arguments."""
    canonical = "|".join(f"{name}={_canonical(kwargs.get(name))}" for name in fingerprint_fields)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Emit a FUNDING_ENGINE_TRACE record for every call of the wrapped engine.

    Usage::

        @traced_engine("entitlement", "1.0", fingerprint_fields=("mode", "counts"))
        def weekly_cap_hours(mode, counts):
            ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.monotonic()
            result = func(*args, **kwargs)
            _logger.debug(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "function": func.__qualname__,
                "input_fingerprint": fingerprint,
                "duration_ms": round((time.monotonic() - started) * 1000, 2),
            })
            return result

        return wrapper

    return decorator
