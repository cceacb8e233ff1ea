"""
funding_engines.annual_projection -- Annual revenue projection across both funding years.

Responsibility:
    Aggregate per-band weekly breakdowns for 24/25 and 25/26, annualise
    them, and produce the ``ProjectionResult`` consumed by the results
    screen, charts and exports.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on ``funding_engines.weekly_revenue``.  Does NOT consult the
    entitlement caps; those only gate what reaches the grids.

Annualisation policies:
    - SNAPSHOT_SCALE: used when the method is ``snapshot`` or ``estimated``,
      a positive 24/25 annual figure ``A`` is supplied, and the modelled
      24/25 weekly total ``W24`` is positive.
          k            = A / (W24 x weeks)
          revenue_2425 = A                      (authoritative, never recomputed)
          revenue_2526 = k x W25 x weeks
    - DIRECT: fallback whenever the snapshot precondition fails.
          revenue_yyyy = weekly_yyyy x weeks

Invariants enforced:
    - Open weeks are clamped into [38, 52] before any annualisation maths
      (missing or non-numeric weeks read as 51).
    - delta_weekly = delta_annual / weeks, guarded for weeks == 0.
    - Bands are processed in fixed display order (U2, 2to3, 3to4).

Failure modes:
    - None.  Any combination of zero or missing inputs yields a complete
      result, possibly all zeros.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from funding_kernel.domain.codes import AgeBand, AnnualisationMethod, FundingYear
from funding_kernel.domain.inputs import (
    DEFAULT_OPEN_WEEKS,
    AnnualisationConfig,
    CalculatorInputs,
)
from funding_kernel.domain.values import ZERO, clamp, to_decimal
from funding_kernel.logging_config import get_logger
from funding_engines.tracer import traced_engine
from funding_engines.weekly_revenue import WeeklyBreakdown, compute_weekly

logger = get_logger("engines.annual_projection")

MIN_OPEN_WEEKS = 38
MAX_OPEN_WEEKS = 52

_SCALING_METHODS = (AnnualisationMethod.SNAPSHOT, AnnualisationMethod.ESTIMATED)


class AnnualisationPolicy(str, Enum):
    """Which annualisation rule produced the annual figures."""

    SNAPSHOT_SCALE = "snapshot_scale"
    DIRECT = "direct"


@dataclass(frozen=True)
class BandProjection:
    """Weekly breakdowns for one band in both funding years."""

    band: AgeBand
    revenue_2425: WeeklyBreakdown
    revenue_2526: WeeklyBreakdown

    @property
    def weekly_change(self) -> Decimal:
        return self.revenue_2526.total - self.revenue_2425.total


@dataclass(frozen=True)
class ProjectionResult:
    """
    Annual projection for the whole nursery.

    ``by_band`` maps each selected band (in display order) to its weekly
    breakdowns as a read-only mapping; the annual figures are totals
    across all bands.
    """

    revenue_2425: Decimal = ZERO
    revenue_2526: Decimal = ZERO
    delta_annual: Decimal = ZERO
    delta_weekly: Decimal = ZERO
    by_band: Mapping[AgeBand, BandProjection] = field(default_factory=lambda: MappingProxyType({}))
    weeks: int = DEFAULT_OPEN_WEEKS
    weekly_2425: Decimal = ZERO
    weekly_2526: Decimal = ZERO
    policy: AnnualisationPolicy = AnnualisationPolicy.DIRECT
    scale_factor: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "by_band", MappingProxyType(dict(self.by_band)))


def clamp_open_weeks(open_weeks: Any) -> int:
    """Whole open weeks clamped into [38, 52]; unusable input reads as 51."""
    weeks = to_decimal(open_weeks, Decimal(DEFAULT_OPEN_WEEKS)).to_integral_value(rounding=ROUND_DOWN)
    return int(clamp(weeks, Decimal(MIN_OPEN_WEEKS), Decimal(MAX_OPEN_WEEKS)))


def annualise(
    weekly_2425: Decimal,
    weekly_2526: Decimal,
    config: AnnualisationConfig | None,
) -> tuple[Decimal, Decimal, int, AnnualisationPolicy, Decimal | None]:
    """
    Convert weekly totals to annual figures.

    Returns:
        (revenue_2425, revenue_2526, weeks, policy, scale_factor) where
        scale_factor is None under the DIRECT policy.
    """
    config = config or AnnualisationConfig()
    weeks = clamp_open_weeks(config.open_weeks)
    actual = to_decimal(config.annual_2425_actual)

    if config.method in _SCALING_METHODS and actual > ZERO and weekly_2425 > ZERO:
        k = actual / (weekly_2425 * weeks)
        return actual, k * weekly_2526 * weeks, weeks, AnnualisationPolicy.SNAPSHOT_SCALE, k

    return (
        weekly_2425 * weeks,
        weekly_2526 * weeks,
        weeks,
        AnnualisationPolicy.DIRECT,
        None,
    )


@traced_engine("annual_projection", "1.0", fingerprint_fields=("inputs",))
def project(inputs: CalculatorInputs) -> ProjectionResult:
    """
    Project annual revenue for both funding years.

    Preconditions:
        None -- every field of ``inputs`` may be empty or zero.

    Postconditions:
        - ``by_band`` has one entry per selected band, in display order.
        - Under SNAPSHOT_SCALE, ``revenue_2425`` equals the supplied
          24/25 annual figure exactly.
        - ``delta_annual == revenue_2526 - revenue_2425``.

    Args:
        inputs: Complete calculator input snapshot.

    Returns:
        ProjectionResult with annual totals, deltas and per-band weekly
        breakdowns.
    """
    t0 = time.monotonic()

    by_band: dict[AgeBand, BandProjection] = {}
    for band in inputs.ordered_bands:
        by_band[band] = BandProjection(
            band=band,
            revenue_2425=_weekly_for(inputs, band, FundingYear.Y2425),
            revenue_2526=_weekly_for(inputs, band, FundingYear.Y2526),
        )

    weekly_2425 = sum((p.revenue_2425.total for p in by_band.values()), ZERO)
    weekly_2526 = sum((p.revenue_2526.total for p in by_band.values()), ZERO)

    revenue_2425, revenue_2526, weeks, policy, k = annualise(
        weekly_2425, weekly_2526, inputs.annualisation,
    )

    delta_annual = revenue_2526 - revenue_2425
    delta_weekly = delta_annual / weeks if weeks > 0 else ZERO

    duration_ms = round((time.monotonic() - t0) * 1000, 2)
    logger.info("projection_annualised", extra={
        "bands": [b.value for b in by_band],
        "weekly_2425": str(weekly_2425),
        "weekly_2526": str(weekly_2526),
        "weeks": weeks,
        "policy": policy.value,
        "scale_factor": str(k) if k is not None else None,
        "revenue_2425": str(revenue_2425),
        "revenue_2526": str(revenue_2526),
        "delta_annual": str(delta_annual),
        "duration_ms": duration_ms,
    })

    return ProjectionResult(
        revenue_2425=revenue_2425,
        revenue_2526=revenue_2526,
        delta_annual=delta_annual,
        delta_weekly=delta_weekly,
        by_band=by_band,
        weeks=weeks,
        weekly_2425=weekly_2425,
        weekly_2526=weekly_2526,
        policy=policy,
        scale_factor=k,
    )


def _weekly_for(inputs: CalculatorInputs, band: AgeBand, year: FundingYear) -> WeeklyBreakdown:
    return compute_weekly(
        band=band,
        year=year,
        grid=inputs.grid_for(year),
        session_hours=inputs.session_hours,
        private_fees=inputs.private_fees,
        rates=inputs.rates_for(year),
        extras=inputs.extras_for(year),
    )
