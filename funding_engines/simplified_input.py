"""
funding_engines.simplified_input -- Weekly session totals to a 5-day grid.

Responsibility:
    Users who do not want to fill the detailed grid enter six weekly
    figures per band (total and funded FD/AM/PM sessions).
    ``expand_simplified_to_grid`` turns them into a ``WeekGrid`` by
    spreading each weekly figure evenly over the five weekdays.  The same
    grid seeds both the 24/25 baseline and the 25/26 projection.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Called directly by the
    orchestrating layer when the user leaves the simplified input step.

Rounding:
    Each session type's weekly figure is divided by 5 and rounded half-up
    on its own, so a weekly total not divisible by 5 can gain or lose units
    (e.g. 7 FD/week becomes 1 per day, 5 per week).  Funded per day is then
    capped at the daily total.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from funding_kernel.domain.codes import AgeBand, Day, SessionType
from funding_kernel.domain.grid import EMPTY_GRID, AttendanceCell, BandWeek, WeekGrid
from funding_kernel.domain.values import to_units
from funding_kernel.exceptions import UnknownCodeError
from funding_kernel.logging_config import get_logger
from funding_engines.tracer import traced_engine

logger = get_logger("engines.simplified_input")

_WEEKDAYS = Decimal(len(Day))

_TOTAL_FIELDS = {
    SessionType.FD: "total_full_day",
    SessionType.AM: "total_morning",
    SessionType.PM: "total_afternoon",
}
_FUNDED_FIELDS = {
    SessionType.FD: "funded_full_day",
    SessionType.AM: "funded_morning",
    SessionType.PM: "funded_afternoon",
}
_FUNDED_FOR_TOTAL = {_TOTAL_FIELDS[s]: _FUNDED_FIELDS[s] for s in SessionType}
_TOTAL_FOR_FUNDED = {v: k for k, v in _FUNDED_FOR_TOTAL.items()}


@dataclass(frozen=True)
class SimplifiedCounts:
    """Weekly session counts for one band (24/25 baseline)."""

    total_full_day: int = 0
    total_morning: int = 0
    total_afternoon: int = 0
    funded_full_day: int = 0
    funded_morning: int = 0
    funded_afternoon: int = 0

    FIELDS = (
        "total_full_day",
        "total_morning",
        "total_afternoon",
        "funded_full_day",
        "funded_morning",
        "funded_afternoon",
    )

    @classmethod
    def of(cls, data: Mapping[str, Any] | None) -> SimplifiedCounts:
        if not isinstance(data, Mapping):
            return cls()
        return cls(**{name: to_units(data.get(name)) for name in cls.FIELDS})

    def total(self, session: SessionType) -> int:
        return to_units(getattr(self, _TOTAL_FIELDS[session]))

    def funded(self, session: SessionType) -> int:
        return to_units(getattr(self, _FUNDED_FIELDS[session]))

    def with_value(self, field_name: str, value: Any) -> SimplifiedCounts:
        """
        Apply one form edit.

        A total edit re-clamps its funded counterpart; a funded edit is
        clamped to its total.
        """
        if field_name not in self.FIELDS:
            raise UnknownCodeError("simplified count field", field_name, self.FIELDS)
        parsed = to_units(value)
        if field_name in _FUNDED_FOR_TOTAL:
            funded_name = _FUNDED_FOR_TOTAL[field_name]
            return replace(
                self,
                **{field_name: parsed, funded_name: min(getattr(self, funded_name), parsed)},
            )
        total_name = _TOTAL_FOR_FUNDED[field_name]
        return replace(self, **{field_name: min(parsed, getattr(self, total_name))})


def _per_day(weekly: int) -> int:
    return int((Decimal(weekly) / _WEEKDAYS).to_integral_value(rounding=ROUND_HALF_UP))


def expand_band(counts: SimplifiedCounts) -> BandWeek:
    """Spread one band's weekly counts evenly across Monday to Friday."""
    week = BandWeek()
    for session in SessionType:
        daily_total = _per_day(counts.total(session))
        daily_funded = min(daily_total, _per_day(counts.funded(session)))
        cell = AttendanceCell(total=daily_total, funded=daily_funded)
        for day in Day:
            week = week.with_cell(day, session, cell)
    return week


@traced_engine("simplified_input", "1.0", fingerprint_fields=("simplified_counts",))
def expand_simplified_to_grid(
    simplified_counts: Mapping[AgeBand, SimplifiedCounts | Mapping[str, Any]],
) -> WeekGrid:
    """
    Build a detailed ``WeekGrid`` from per-band weekly counts.

    Bands absent from ``simplified_counts`` stay empty.  Raw mappings are
    accepted for each band and coerced through ``SimplifiedCounts.of``.
    """
    grid = EMPTY_GRID
    for band in AgeBand.ordered(simplified_counts.keys()):
        raw = simplified_counts[band]
        counts = raw if isinstance(raw, SimplifiedCounts) else SimplifiedCounts.of(raw)
        grid = grid.with_band(band, expand_band(counts))

    logger.info("simplified_input_expanded", extra={
        "bands": [b.value for b in AgeBand.ordered(simplified_counts.keys())],
    })
    return grid
