"""
funding_engines.weekly_revenue -- Weekly funded/paid revenue for one band and year.

Responsibility:
    Convert one age band's 5-day x 3-session attendance grid, together with
    session durations, private fees, the authority rate and per-session
    extras for a funding year, into a ``WeeklyBreakdown``: funded revenue,
    privately paid revenue and funded hours.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Leaf component; consumed
    by ``funding_engines.annual_projection`` and directly by presentation
    code that shows per-band weekly figures.

Invariants enforced:
    - Defensive coercion: every read goes through the kernel coercion
      helpers, so missing, non-numeric, non-finite or negative inputs
      contribute zero.
    - ``funded <= total`` is re-asserted for every cell read, so a corrupted
      grid can never produce negative paid units.
    - ``hours.paid`` is always zero; private session hours are not tracked.

Failure modes:
    - None.  Missing grids, rate tables or extras degrade to zero.

Formula:
    funded_hours   = sum(funded_units x session_hours[session])
    paid_revenue   = sum((total - funded) x private_fees[session])
    extras_revenue = full_day_funded_units x per_funded_full_day
                     + half_day_funded_units x per_funded_half_day
    funded_revenue = funded_hours x band_rate + extras_revenue
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from funding_kernel.domain.codes import AgeBand, FundingYear
from funding_kernel.domain.grid import EMPTY_WEEK, BandWeek, WeekGrid
from funding_kernel.domain.inputs import (
    DEFAULT_SESSION_HOURS,
    ExtrasConfig,
    RateConfig,
    SessionTable,
)
from funding_kernel.domain.values import ZERO
from funding_kernel.logging_config import get_logger
from funding_engines.tracer import traced_engine

logger = get_logger("engines.weekly_revenue")


@dataclass(frozen=True)
class HoursBreakdown:
    """Weekly hours. Paid hours are not tracked and stay zero."""

    funded: Decimal = ZERO
    paid: Decimal = ZERO


@dataclass(frozen=True)
class WeeklyBreakdown:
    """Weekly revenue for one band in one funding year."""

    funded: Decimal = ZERO
    paid: Decimal = ZERO
    hours: HoursBreakdown = HoursBreakdown()

    @property
    def total(self) -> Decimal:
        return self.funded + self.paid


@traced_engine("weekly_revenue", "1.0", fingerprint_fields=("band", "year", "rates", "extras"))
def compute_weekly(
    band: AgeBand,
    year: FundingYear,
    grid: WeekGrid | BandWeek | None,
    session_hours: SessionTable | None = None,
    private_fees: SessionTable | None = None,
    rates: RateConfig | None = None,
    extras: ExtrasConfig | None = None,
) -> WeeklyBreakdown:
    """
    Compute the weekly breakdown for ``band`` in funding ``year``.

    Args:
        band: Age band being computed.
        year: Funding year; used for logging only, callers pass that
            year's grid, rates and extras.
        grid: The year's ``WeekGrid`` (the band's week is selected) or the
            band's ``BandWeek`` directly.  ``None`` reads as empty.
        session_hours: Duration of each session type; defaults to
            FD 10h, AM 5h, PM 5h.
        private_fees: Private fee per session type; defaults to zero.
        rates: Authority hourly rates for ``year``; unset means zero.
        extras: Per funded full-day / half-day top-ups for ``year``.

    Returns:
        WeeklyBreakdown with ``hours.paid`` always zero.
    """
    if isinstance(grid, WeekGrid):
        week = grid.band(band)
    elif isinstance(grid, BandWeek):
        week = grid
    else:
        week = EMPTY_WEEK
    hours_table = session_hours or DEFAULT_SESSION_HOURS
    fee_table = private_fees or SessionTable()
    extras = extras or ExtrasConfig()

    funded_hours = ZERO
    paid_revenue = ZERO
    full_day_units = 0
    half_day_units = 0

    for _day, session, raw_cell in week.cells():
        cell = raw_cell.normalized()
        funded_hours += cell.funded * hours_table.get(session)
        paid_revenue += (cell.total - cell.funded) * fee_table.get(session)
        if session.is_full_day:
            full_day_units += cell.funded
        elif session.is_half_day:
            half_day_units += cell.funded

    extras_revenue = full_day_units * extras.full_day + half_day_units * extras.half_day
    band_rate = rates.rate_for(band) if rates is not None else ZERO
    funded_revenue = funded_hours * band_rate + extras_revenue

    logger.debug("weekly_revenue_computed", extra={
        "band": band.value,
        "funding_year": year.value,
        "funded_hours": str(funded_hours),
        "full_day_units": full_day_units,
        "half_day_units": half_day_units,
        "band_rate": str(band_rate),
        "funded_revenue": str(funded_revenue),
        "paid_revenue": str(paid_revenue),
    })

    return WeeklyBreakdown(
        funded=funded_revenue,
        paid=paid_revenue,
        hours=HoursBreakdown(funded=funded_hours, paid=ZERO),
    )
