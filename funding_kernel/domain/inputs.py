"""
Input tables for the funding calculator.

Frozen value objects for everything the engines read besides the grids:
session durations and private fees, authority rates, per-session extras,
claimant counts, annualisation settings, and the ``CalculatorInputs``
snapshot that bundles them for a projection.

Stored values are whatever the caller supplied; accessor methods
(``SessionTable.get``, ``RateConfig.rate_for`` ...) apply the coercion
policy so a malformed entry reads as zero instead of raising.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from funding_kernel.domain.codes import (
    AgeBand,
    AnnualisationMethod,
    FundingMode,
    FundingYear,
    SessionType,
)
from funding_kernel.domain.grid import EMPTY_GRID, WeekGrid
from funding_kernel.domain.values import ZERO, non_negative, to_units

DEFAULT_OPEN_WEEKS = 51


@dataclass(frozen=True)
class SessionTable:
    """One Decimal per session type (durations in hours, or fees)."""

    fd: Decimal = ZERO
    am: Decimal = ZERO
    pm: Decimal = ZERO

    def get(self, session: SessionType) -> Decimal:
        return non_negative(getattr(self, session.value.lower()))

    @classmethod
    def of(cls, data: Mapping[str, Any] | None, default: SessionTable | None = None) -> SessionTable:
        base = default or cls()
        if not isinstance(data, Mapping):
            return base
        values = {s.value.lower(): getattr(base, s.value.lower()) for s in SessionType}
        for code, raw in data.items():
            session = SessionType.parse(code)
            values[session.value.lower()] = non_negative(raw)
        return cls(**values)

    def to_mapping(self) -> dict[str, Decimal]:
        return {s.value: self.get(s) for s in SessionType}


DEFAULT_SESSION_HOURS = SessionTable(fd=Decimal("10"), am=Decimal("5"), pm=Decimal("5"))


@dataclass(frozen=True)
class RateConfig:
    """Authority hourly rate per age band for one funding year."""

    rates: tuple[Decimal, ...] = (ZERO,) * len(AgeBand)

    def rate_for(self, band: AgeBand) -> Decimal:
        """Rate for ``band``; zero means "not yet entered", not an error."""
        try:
            return non_negative(self.rates[band.position])
        except IndexError:
            return ZERO

    @classmethod
    def of(cls, data: Mapping[str, Any] | None) -> RateConfig:
        """
        Accept ``{band: rate}`` or ``{band: {"total_rate": rate}}``.

        A band entry without ``total_rate`` falls back to
        ``base_rate + supplement`` when those are present.
        """
        rates = [ZERO] * len(AgeBand)
        if not isinstance(data, Mapping):
            return cls(rates=tuple(rates))
        for code, raw in data.items():
            band = AgeBand.parse(code)
            if isinstance(raw, Mapping):
                if raw.get("total_rate") is not None:
                    value = non_negative(raw.get("total_rate"))
                else:
                    value = non_negative(raw.get("base_rate")) + non_negative(raw.get("supplement"))
            else:
                value = non_negative(raw)
            rates[band.position] = value
        return cls(rates=tuple(rates))


@dataclass(frozen=True)
class ExtrasConfig:
    """Flat top-up charged per funded session unit."""

    per_funded_full_day: Decimal = ZERO
    per_funded_half_day: Decimal = ZERO

    @property
    def full_day(self) -> Decimal:
        return non_negative(self.per_funded_full_day)

    @property
    def half_day(self) -> Decimal:
        return non_negative(self.per_funded_half_day)

    @classmethod
    def of(cls, data: Mapping[str, Any] | None) -> ExtrasConfig:
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            per_funded_full_day=non_negative(data.get("per_funded_full_day", data.get("perFundedFullDay"))),
            per_funded_half_day=non_negative(data.get("per_funded_half_day", data.get("perFundedHalfDay"))),
        )


@dataclass(frozen=True)
class ClaimantCounts:
    """
    Number of children claiming each 25/26 entitlement in one band.

    ``thirty_stretched_twoday`` is the subset of ``thirty_stretched``
    attending on a two-day pattern.
    """

    fifteen_stretched: int = 0
    thirty_stretched: int = 0
    thirty_stretched_twoday: int = 0
    fifteen_term: int = 0
    thirty_term: int = 0

    FIELDS = (
        "fifteen_stretched",
        "thirty_stretched",
        "thirty_stretched_twoday",
        "fifteen_term",
        "thirty_term",
    )

    @classmethod
    def of(cls, data: Mapping[str, Any]) -> ClaimantCounts:
        """Coerce every field to a non-negative int; cap two-day at thirty_stretched."""
        values = {name: to_units(data.get(name)) for name in cls.FIELDS}
        values["thirty_stretched_twoday"] = min(
            values["thirty_stretched_twoday"], values["thirty_stretched"]
        )
        return cls(**values)


@dataclass(frozen=True)
class AnnualisationConfig:
    """
    Annualisation settings.

    ``open_weeks`` is stored as supplied; the projector clamps it to
    [38, 52] before use.
    """

    method: AnnualisationMethod | None = AnnualisationMethod.SNAPSHOT
    annual_2425_actual: Decimal | None = None
    open_weeks: Any = DEFAULT_OPEN_WEEKS


@dataclass(frozen=True)
class CalculatorInputs:
    """
    Complete input snapshot for one projection.

    Mapping fields are treated as read-only; use ``replace``-style helpers
    (``with_grid``) to derive a modified snapshot.
    """

    age_bands: frozenset[AgeBand] = frozenset(AgeBand)
    grid_2425: WeekGrid = EMPTY_GRID
    grid_2526: WeekGrid = EMPTY_GRID
    session_hours: SessionTable = DEFAULT_SESSION_HOURS
    private_fees: SessionTable = field(default_factory=SessionTable)
    rates_2425: RateConfig = field(default_factory=RateConfig)
    rates_2526: RateConfig = field(default_factory=RateConfig)
    extras_2425: ExtrasConfig = field(default_factory=ExtrasConfig)
    extras_2526: ExtrasConfig = field(default_factory=ExtrasConfig)
    annualisation: AnnualisationConfig = field(default_factory=AnnualisationConfig)
    claimant_counts: Mapping[AgeBand, ClaimantCounts] = field(default_factory=dict)
    mode_by_band: Mapping[AgeBand, FundingMode] = field(default_factory=dict)
    enforce_caps: bool = True

    @property
    def ordered_bands(self) -> tuple[AgeBand, ...]:
        return AgeBand.ordered(self.age_bands)

    def grid_for(self, year: FundingYear) -> WeekGrid:
        return self.grid_2425 if year is FundingYear.Y2425 else self.grid_2526

    def rates_for(self, year: FundingYear) -> RateConfig:
        return self.rates_2425 if year is FundingYear.Y2425 else self.rates_2526

    def extras_for(self, year: FundingYear) -> ExtrasConfig:
        return self.extras_2425 if year is FundingYear.Y2425 else self.extras_2526

    def mode_for(self, band: AgeBand) -> FundingMode:
        return self.mode_by_band.get(band, FundingMode.STRETCHED)

    def counts_for(self, band: AgeBand) -> ClaimantCounts | None:
        return self.claimant_counts.get(band)

    def with_grid(self, year: FundingYear, grid: WeekGrid) -> CalculatorInputs:
        if year is FundingYear.Y2425:
            return replace(self, grid_2425=grid)
        return replace(self, grid_2526=grid)
