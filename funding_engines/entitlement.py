"""
funding_engines.entitlement -- 25/26 entitlement caps on funded hours.

Responsibility:
    Compute the maximum funded hours per week a band may claim under the
    25/26 rules from its claimant counts and funding mode, and clamp
    funded-unit edits on the 25/26 grid so a band's allocated funded hours
    never exceed that cap.  Also provides the cap meter figures and the
    claimant-count editing/validation rules used by the term-settings form.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Leaf component consumed
    by ``funding_engines.grid_editing`` and the input forms.  The annual
    projector never consults caps.

Weekly hours per child:
    15h stretched            11.176470588235293
    30h stretched            22.352941176470587
    30h stretched, two-day   20
    15h term-time            15
    30h term-time            30

    Stretched figures spread an annual entitlement over the operating year;
    term-time figures are flat because they only apply in term weeks.

Invariants enforced:
    - Mode partition: STRETCHED reads only the stretched fields, TERMTIME
      only the term-time fields, MIXED reads both.  Counts in inactive
      fields never move the cap.
    - The two-day subset is capped at ``thirty_stretched``.
    - Cap is non-negative and non-decreasing in every count.
    - ``clamp_funded_edit`` never returns more than the proposal, the
      cell's total, or the band's remaining cap (when caps are active).

Failure modes:
    - None for cap arithmetic: missing or malformed counts give a cap of 0,
      and a cap of 0 disables the clamp (treated as "no data yet").
    - ``update_claimant_count`` raises ``UnknownCodeError`` for a field
      name that is not a claimant-count field (programming error).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from decimal import ROUND_FLOOR, Decimal
from typing import Any

from funding_kernel.domain.codes import AgeBand, Day, FundingMode, FundingYear, SessionType
from funding_kernel.domain.grid import BandWeek, WeekGrid
from funding_kernel.domain.inputs import (
    DEFAULT_SESSION_HOURS,
    CalculatorInputs,
    ClaimantCounts,
    SessionTable,
)
from funding_kernel.domain.values import ONE_HUNDRED, ZERO, to_units
from funding_kernel.exceptions import UnknownCodeError
from funding_kernel.logging_config import get_logger
from funding_engines.tracer import traced_engine

logger = get_logger("engines.entitlement")

HOURS_FIFTEEN_STRETCHED = Decimal("11.176470588235293")
HOURS_THIRTY_STRETCHED = Decimal("22.352941176470587")
HOURS_THIRTY_STRETCHED_TWODAY = Decimal("20")
HOURS_FIFTEEN_TERM = Decimal("15")
HOURS_THIRTY_TERM = Decimal("30")

OVER_CAP_TOLERANCE = Decimal("1e-9")

_STRETCHED_FIELDS = ("fifteen_stretched", "thirty_stretched")
_TERM_FIELDS = ("fifteen_term", "thirty_term")


# ---------------------------------------------------------------------------
# Contract A: weekly cap
# ---------------------------------------------------------------------------


def _resolve_mode(mode: Any) -> FundingMode | None:
    if mode is None:
        return FundingMode.STRETCHED
    try:
        return FundingMode.parse(mode)
    except UnknownCodeError:
        logger.warning("funding_mode_unrecognised", extra={"mode": str(mode)})
        return None


def _resolve_counts(counts: Any) -> ClaimantCounts | None:
    if isinstance(counts, ClaimantCounts):
        return ClaimantCounts.of({name: getattr(counts, name) for name in ClaimantCounts.FIELDS})
    if isinstance(counts, Mapping):
        return ClaimantCounts.of(counts)
    return None


@traced_engine("entitlement", "1.0", fingerprint_fields=("mode", "counts"))
def weekly_cap_hours(mode: FundingMode | str | None, counts: ClaimantCounts | Mapping[str, Any] | None) -> Decimal:
    """
    Maximum funded hours per week for a band under 25/26 rules.

    Args:
        mode: Funding mode; ``None`` means STRETCHED.  An unrecognised
            mode includes neither component (cap 0).
        counts: Claimant counts as ``ClaimantCounts`` or a raw mapping.
            Missing or malformed counts give a cap of 0.

    Returns:
        Non-negative weekly cap in hours.
    """
    resolved_mode = _resolve_mode(mode)
    resolved = _resolve_counts(counts)
    if resolved is None or resolved_mode is None:
        return ZERO

    cap = ZERO
    if resolved_mode.includes_stretched:
        twoday = min(resolved.thirty_stretched_twoday, resolved.thirty_stretched)
        remainder = resolved.thirty_stretched - twoday
        cap += resolved.fifteen_stretched * HOURS_FIFTEEN_STRETCHED
        cap += remainder * HOURS_THIRTY_STRETCHED
        cap += twoday * HOURS_THIRTY_STRETCHED_TWODAY
    if resolved_mode.includes_term_time:
        cap += resolved.fifteen_term * HOURS_FIFTEEN_TERM
        cap += resolved.thirty_term * HOURS_THIRTY_TERM
    return cap


def band_allocated_hours(week: BandWeek, session_hours: SessionTable | None = None) -> Decimal:
    """Funded hours currently allocated across all 15 cells of a band."""
    hours_table = session_hours or DEFAULT_SESSION_HOURS
    total = ZERO
    for _day, session, cell in week.cells():
        total += cell.normalized().funded * hours_table.get(session)
    return total


# ---------------------------------------------------------------------------
# Contract B: clamp a funded edit
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FundedEditContext:
    """
    Everything the clamp needs besides the edited cell's coordinates.

    Caps apply only to the 25/26 grid and only when ``enforce_caps`` is set.
    """

    grid: WeekGrid
    session_hours: SessionTable = DEFAULT_SESSION_HOURS
    year: FundingYear = FundingYear.Y2526
    enforce_caps: bool = False
    mode_by_band: Mapping[AgeBand, FundingMode] = field(default_factory=dict)
    claimant_counts: Mapping[AgeBand, ClaimantCounts] = field(default_factory=dict)

    @property
    def caps_active(self) -> bool:
        return self.enforce_caps and self.year is FundingYear.Y2526

    def cap_for(self, band: AgeBand) -> Decimal:
        if not self.caps_active:
            return ZERO
        return weekly_cap_hours(
            mode=self.mode_by_band.get(band, FundingMode.STRETCHED),
            counts=self.claimant_counts.get(band),
        )

    @classmethod
    def from_inputs(cls, inputs: CalculatorInputs, year: FundingYear) -> FundedEditContext:
        return cls(
            grid=inputs.grid_for(year),
            session_hours=inputs.session_hours,
            year=year,
            enforce_caps=inputs.enforce_caps,
            mode_by_band=inputs.mode_by_band,
            claimant_counts=inputs.claimant_counts,
        )


@traced_engine("entitlement", "1.0", fingerprint_fields=("band", "day", "session", "proposed_units"))
def clamp_funded_edit(
    band: AgeBand,
    day: Day,
    session: SessionType,
    proposed_units: Any,
    context: FundedEditContext,
) -> int:
    """
    Largest funded-unit count the edited cell may commit.

    The proposal is first held to the cell's ``total``.  When caps are
    active, the band's cap is positive and the session has a positive
    duration, it is further held to::

        remaining = cap - (band_hours - this_cell_hours)
        max_units = floor(remaining / session_hours)

    A cap of 0 means no claimant data yet and applies no cap clamp.

    Args:
        band, day, session: Coordinates of the edited cell.
        proposed_units: Raw proposed funded count (coerced to a
            non-negative int).
        context: Grid, durations and cap inputs.

    Returns:
        ``min(proposal, total, max(0, max_units))`` as an int.
    """
    week = context.grid.band(band)
    cell = week.cell(day, session).normalized()
    proposed = to_units(proposed_units)
    allowed = min(proposed, cell.total)

    if not context.caps_active:
        return allowed
    cap = context.cap_for(band)
    if cap <= ZERO:
        return allowed
    duration = context.session_hours.get(session)
    if duration <= ZERO:
        return allowed

    other_cells_hours = band_allocated_hours(week, context.session_hours) - cell.funded * duration
    remaining = cap - other_cells_hours
    max_units = int((remaining / duration).to_integral_value(rounding=ROUND_FLOOR))
    result = min(allowed, max(0, max_units))

    if result < allowed:
        logger.info("funded_edit_clamped", extra={
            "band": band.value,
            "day": day.value,
            "session": session.value,
            "proposed_units": proposed,
            "allowed_units": result,
            "cap_hours": str(cap),
            "remaining_hours": str(remaining),
        })
    return result


# ---------------------------------------------------------------------------
# Cap meter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CapStatus:
    """Allocated vs. cap figures for one band's 25/26 grid."""

    band: AgeBand
    cap_hours: Decimal
    allocated_hours: Decimal

    @property
    def remaining_hours(self) -> Decimal:
        return max(ZERO, self.cap_hours - self.allocated_hours)

    @property
    def over_by_hours(self) -> Decimal:
        return max(ZERO, self.allocated_hours - self.cap_hours)

    @property
    def utilisation_pct(self) -> Decimal:
        if self.cap_hours <= ZERO:
            return ZERO
        return min(ONE_HUNDRED, self.allocated_hours / self.cap_hours * ONE_HUNDRED)

    @property
    def is_over_cap(self) -> bool:
        return self.cap_hours > ZERO and self.allocated_hours > self.cap_hours + OVER_CAP_TOLERANCE


def cap_status(
    band: AgeBand,
    week: BandWeek,
    session_hours: SessionTable | None,
    mode: FundingMode | str | None,
    counts: ClaimantCounts | Mapping[str, Any] | None,
) -> CapStatus:
    return CapStatus(
        band=band,
        cap_hours=weekly_cap_hours(mode=mode, counts=counts),
        allocated_hours=band_allocated_hours(week, session_hours),
    )


# ---------------------------------------------------------------------------
# Claimant-count editing and validation
# ---------------------------------------------------------------------------


def update_claimant_count(
    counts: ClaimantCounts | None,
    mode: FundingMode | None,
    field_name: str,
    value: Any,
) -> tuple[ClaimantCounts, FundingMode]:
    """
    Apply one claimant-count edit.

    Rules:
        - The value is coerced to a non-negative int.
        - Editing ``thirty_stretched_twoday`` caps it at ``thirty_stretched``.
        - Editing ``thirty_stretched`` re-caps the two-day subset.
        - A positive two-day count needs a stretched component, so TERMTIME
          becomes MIXED (an unset mode becomes STRETCHED).

    Returns:
        (new_counts, new_mode)
    """
    if field_name not in ClaimantCounts.FIELDS:
        raise UnknownCodeError("claimant count field", field_name, ClaimantCounts.FIELDS)

    current = counts or ClaimantCounts()
    parsed = to_units(value)
    updated = replace(current, **{field_name: parsed})

    if field_name == "thirty_stretched_twoday":
        updated = replace(updated, thirty_stretched_twoday=min(parsed, updated.thirty_stretched))
    elif field_name == "thirty_stretched":
        updated = replace(
            updated, thirty_stretched_twoday=min(updated.thirty_stretched_twoday, parsed)
        )

    new_mode = mode
    if field_name == "thirty_stretched_twoday" and updated.thirty_stretched_twoday > 0:
        if mode is FundingMode.TERMTIME:
            new_mode = FundingMode.MIXED
        elif mode not in (FundingMode.MIXED, FundingMode.STRETCHED):
            new_mode = FundingMode.STRETCHED
    return updated, new_mode or FundingMode.STRETCHED


@dataclass(frozen=True)
class ClaimantIssue:
    band: AgeBand
    field_name: str | None
    message: str


@dataclass(frozen=True)
class ClaimantValidationResult:
    """Outcome of checking claimant counts before caps can be enforced."""

    is_valid: bool
    issues: tuple[ClaimantIssue, ...] = ()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_claimant_counts(
    bands: Iterable[AgeBand],
    counts_by_band: Mapping[AgeBand, ClaimantCounts | Mapping[str, Any]],
    mode_by_band: Mapping[AgeBand, FundingMode | str],
    enforce_caps: bool,
) -> ClaimantValidationResult:
    """
    Check that every selected band has the counts its mode needs.

    With caps disabled nothing is required.  Otherwise each band needs a
    counts entry, and the fields of its active mode (``fifteen_*`` and
    ``thirty_*`` for stretched and/or term-time) must be present.  Zero is
    a valid answer; blank is not.  A mode code that does not parse is
    reported as an issue for its band.
    """
    if not enforce_caps:
        return ClaimantValidationResult(is_valid=True)

    issues: list[ClaimantIssue] = []
    for band in AgeBand.ordered(bands):
        counts = counts_by_band.get(band)
        if counts is None:
            issues.append(ClaimantIssue(band, None, f"No claimant counts entered for {band.label}"))
            continue
        mode = _resolve_mode(mode_by_band.get(band))
        if mode is None:
            issues.append(ClaimantIssue(band, None, f"Unrecognised funding mode for {band.label}"))
            continue
        if isinstance(counts, ClaimantCounts):
            continue
        required: tuple[str, ...] = ()
        if mode.includes_stretched:
            required += _STRETCHED_FIELDS
        if mode.includes_term_time:
            required += _TERM_FIELDS
        for name in required:
            if _is_blank(counts.get(name)):
                issues.append(ClaimantIssue(band, name, f"{name} is required for {band.label}"))

    if issues:
        logger.info("claimant_counts_incomplete", extra={
            "issue_count": len(issues),
            "bands": sorted({i.band.value for i in issues}),
        })
    return ClaimantValidationResult(is_valid=not issues, issues=tuple(issues))
