"""Pure domain types for the funding calculator (no I/O)."""

from funding_kernel.domain.codes import (
    AgeBand,
    AnnualisationMethod,
    CodedEnum,
    Day,
    FundingMode,
    FundingYear,
    SessionType,
)
from funding_kernel.domain.grid import (
    EMPTY_CELL,
    EMPTY_GRID,
    EMPTY_WEEK,
    AttendanceCell,
    BandWeek,
    WeekGrid,
    empty_grid,
)
from funding_kernel.domain.inputs import (
    DEFAULT_OPEN_WEEKS,
    DEFAULT_SESSION_HOURS,
    AnnualisationConfig,
    CalculatorInputs,
    ClaimantCounts,
    ExtrasConfig,
    RateConfig,
    SessionTable,
)
from funding_kernel.domain.values import (
    ONE_HUNDRED,
    ZERO,
    clamp,
    non_negative,
    to_decimal,
    to_units,
)

__all__ = [
    "AgeBand",
    "AnnualisationConfig",
    "AnnualisationMethod",
    "AttendanceCell",
    "BandWeek",
    "CalculatorInputs",
    "ClaimantCounts",
    "CodedEnum",
    "DEFAULT_OPEN_WEEKS",
    "DEFAULT_SESSION_HOURS",
    "Day",
    "EMPTY_CELL",
    "EMPTY_GRID",
    "EMPTY_WEEK",
    "ExtrasConfig",
    "FundingMode",
    "FundingYear",
    "ONE_HUNDRED",
    "RateConfig",
    "SessionTable",
    "SessionType",
    "WeekGrid",
    "ZERO",
    "clamp",
    "empty_grid",
    "non_negative",
    "to_decimal",
    "to_units",
]
