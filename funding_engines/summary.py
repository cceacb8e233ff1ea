"""
funding_engines.summary -- Weekly drivers and headline figures for a projection.

Responsibility:
    Reduce a ``ProjectionResult`` to the figures the results screen and
    exports show: funded/paid revenue and funded hours per year with their
    deltas, the headline percentage change, a break-even hint for paid fees,
    and per-band rows with funded/paid shares of each year's weekly total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Reads only the
    ``ProjectionResult``; never recomputes revenue.

Invariants enforced:
    - Every ratio is guarded: a zero baseline gives 0, never an error.
    - Shares divide by ``max(1, weekly_total)`` so an empty band shows 0%.
    - ``break_even_paid_uplift_pct`` is never negative.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from funding_kernel.domain.codes import AgeBand
from funding_kernel.domain.values import ONE_HUNDRED, ZERO
from funding_kernel.logging_config import get_logger
from funding_engines.annual_projection import BandProjection, ProjectionResult
from funding_engines.tracer import traced_engine

logger = get_logger("engines.summary")

_ONE = Decimal("1")


def _pct(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator <= ZERO:
        return ZERO
    return numerator / denominator * ONE_HUNDRED


@dataclass(frozen=True)
class YearDrivers:
    """Weekly totals across all selected bands for one funding year."""

    funded: Decimal = ZERO
    paid: Decimal = ZERO
    funded_hours: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.funded + self.paid


@dataclass(frozen=True)
class BandSummary:
    """One results-table row."""

    band: AgeBand
    weekly_2425: Decimal
    weekly_2526: Decimal
    change: Decimal
    pct_change: Decimal
    funded_share_2425: Decimal
    paid_share_2425: Decimal
    funded_share_2526: Decimal
    paid_share_2526: Decimal

    @property
    def label(self) -> str:
        return self.band.label


@dataclass(frozen=True)
class ResultsSummary:
    drivers_2425: YearDrivers
    drivers_2526: YearDrivers
    headline_pct: Decimal
    break_even_paid_uplift_pct: Decimal
    bands: tuple[BandSummary, ...] = ()

    @property
    def funded_delta(self) -> Decimal:
        return self.drivers_2526.funded - self.drivers_2425.funded

    @property
    def paid_delta(self) -> Decimal:
        return self.drivers_2526.paid - self.drivers_2425.paid

    @property
    def hours_delta(self) -> Decimal:
        return self.drivers_2526.funded_hours - self.drivers_2425.funded_hours

    @property
    def weekly_delta(self) -> Decimal:
        return self.drivers_2526.total - self.drivers_2425.total

    @property
    def is_positive(self) -> bool:
        return self.headline_pct >= ZERO


def _band_row(projection: BandProjection) -> BandSummary:
    before = projection.revenue_2425
    after = projection.revenue_2526
    share_base_2425 = max(_ONE, before.total)
    share_base_2526 = max(_ONE, after.total)
    change = after.total - before.total
    return BandSummary(
        band=projection.band,
        weekly_2425=before.total,
        weekly_2526=after.total,
        change=change,
        pct_change=_pct(change, before.total),
        funded_share_2425=before.funded / share_base_2425 * ONE_HUNDRED,
        paid_share_2425=before.paid / share_base_2425 * ONE_HUNDRED,
        funded_share_2526=after.funded / share_base_2526 * ONE_HUNDRED,
        paid_share_2526=after.paid / share_base_2526 * ONE_HUNDRED,
    )


@traced_engine("summary", "1.0")
def summarize(result: ProjectionResult) -> ResultsSummary:
    """
    Build the results summary for ``result``.

    Formulas:
        headline_pct               = delta_annual / revenue_2425 x 100
        break_even_paid_uplift_pct = max(0, -weekly_delta / paid_2425) x 100

    Both are 0 when their denominator is 0.
    """
    rows = tuple(_band_row(p) for p in result.by_band.values())
    projections = tuple(result.by_band.values())

    drivers_2425 = YearDrivers(
        funded=sum((p.revenue_2425.funded for p in projections), ZERO),
        paid=sum((p.revenue_2425.paid for p in projections), ZERO),
        funded_hours=sum((p.revenue_2425.hours.funded for p in projections), ZERO),
    )
    drivers_2526 = YearDrivers(
        funded=sum((p.revenue_2526.funded for p in projections), ZERO),
        paid=sum((p.revenue_2526.paid for p in projections), ZERO),
        funded_hours=sum((p.revenue_2526.hours.funded for p in projections), ZERO),
    )

    weekly_delta = drivers_2526.total - drivers_2425.total
    break_even = ZERO
    if drivers_2425.paid > ZERO:
        break_even = max(ZERO, -weekly_delta / drivers_2425.paid) * ONE_HUNDRED

    summary = ResultsSummary(
        drivers_2425=drivers_2425,
        drivers_2526=drivers_2526,
        headline_pct=_pct(result.delta_annual, result.revenue_2425),
        break_even_paid_uplift_pct=break_even,
        bands=rows,
    )

    logger.debug("results_summarized", extra={
        "headline_pct": str(summary.headline_pct),
        "weekly_delta": str(weekly_delta),
        "break_even_paid_uplift_pct": str(break_even),
    })
    return summary
