"""
Pytest fixtures for the funding calculator test suite.

Provides:
- Structured logging configured for every test run
- Log capture as parsed JSON records
- Common input builders (grids, rates, claimant counts)
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from funding_kernel.domain import (
    AgeBand,
    AttendanceCell,
    CalculatorInputs,
    ClaimantCounts,
    Day,
    ExtrasConfig,
    FundingMode,
    RateConfig,
    SessionTable,
    SessionType,
    WeekGrid,
    empty_grid,
)
from funding_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture funding_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            project(inputs=inputs)
            logs = captured_logs()
            assert any(r["message"] == "projection_annualised" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("funding_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Input builders
# =============================================================================


def _fill_band(
    grid: WeekGrid,
    band: AgeBand,
    session: SessionType,
    total: int,
    funded: int,
    days: tuple[Day, ...] = tuple(Day),
) -> WeekGrid:
    """Set the same cell on every listed day of one band."""
    for day in days:
        grid = grid.with_cell(band, day, session, AttendanceCell.of(total, funded))
    return grid


@pytest.fixture
def fill_band():
    return _fill_band


@pytest.fixture
def default_rates() -> RateConfig:
    return RateConfig.of({"U2": "8.50", "2to3": "7.50", "3to4": "5.80"})


@pytest.fixture
def default_extras() -> ExtrasConfig:
    return ExtrasConfig(per_funded_full_day=Decimal("8"), per_funded_half_day=Decimal("5"))


@pytest.fixture
def three_to_four_inputs(default_rates, default_extras) -> CalculatorInputs:
    """
    One 3-4 band with one funded FD and one paid AM every weekday in both
    years, private fees FD 75 / AM 37.50 / PM 37.50.
    """
    grid = _fill_band(empty_grid(), AgeBand.THREE_TO_FOUR, SessionType.FD, total=1, funded=1)
    grid = _fill_band(grid, AgeBand.THREE_TO_FOUR, SessionType.AM, total=1, funded=0)
    return CalculatorInputs(
        age_bands=frozenset({AgeBand.THREE_TO_FOUR}),
        grid_2425=grid,
        grid_2526=grid,
        private_fees=SessionTable(fd=Decimal("75"), am=Decimal("37.5"), pm=Decimal("37.5")),
        rates_2425=default_rates,
        rates_2526=default_rates,
        extras_2425=default_extras,
        extras_2526=default_extras,
    )


@pytest.fixture
def stretched_counts() -> ClaimantCounts:
    """10 x 15h stretched, 4 x 30h stretched (1 on a two-day pattern)."""
    return ClaimantCounts(fifteen_stretched=10, thirty_stretched=4, thirty_stretched_twoday=1)


@pytest.fixture
def stretched_modes() -> dict[AgeBand, FundingMode]:
    return {band: FundingMode.STRETCHED for band in AgeBand}
