"""
Numeric coercion primitives for calculator inputs.

Every amount, rate and duration in the calculator is a ``Decimal``; every
attendance count is an ``int``.  Input arrives from forms and YAML in
whatever shape the user typed, so reads go through these helpers:

* ``to_decimal`` -- non-finite-safe conversion, falling back to a default
  for ``None``, booleans, empty or unparseable strings, NaN and infinity.
* ``non_negative`` -- ``to_decimal`` floored at zero.
* ``to_units`` -- whole non-negative unit count, truncating fractions.

None of these raise.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
ONE_HUNDRED = Decimal("100")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Convert ``value`` to a finite Decimal, or return ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        return Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return default
        # str() keeps the shortest repr, not the binary expansion
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            result = Decimal(text)
        except InvalidOperation:
            return default
    else:
        return default
    if not result.is_finite():
        return default
    return result


def non_negative(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce to Decimal and floor at zero."""
    result = to_decimal(value, default)
    return result if result > ZERO else ZERO


def to_units(value: Any) -> int:
    """Coerce to a whole, non-negative unit count (fractions truncate)."""
    return int(non_negative(value))


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    """Clamp ``value`` into ``[low, high]``."""
    return min(high, max(low, value))
