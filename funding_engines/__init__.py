"""
Module: funding_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for the presentation
    layer and for ``funding_config``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import funding_kernel (and sibling engine modules).

Invariants enforced:
    - Decimal-only arithmetic: every amount, rate and hour figure is a
      ``Decimal``; unit counts are ``int``.
    - Determinism: identical inputs always produce identical outputs.
    - Totality: engines never raise on malformed numbers; they coerce to
      zero and fall back to direct annualisation.

Audit relevance:
    Every engine entry point is wrapped by ``@traced_engine`` (see
    ``funding_engines.tracer``), emitting FUNDING_ENGINE_TRACE records with
    engine name, version, input fingerprint and duration.

Usage:
    from funding_engines.weekly_revenue import compute_weekly
    from funding_engines.annual_projection import project
    from funding_engines.entitlement import weekly_cap_hours, clamp_funded_edit
    from funding_engines.simplified_input import expand_simplified_to_grid
"""

from funding_kernel.logging_config import get_logger

logger = get_logger("engines")

from funding_engines.annual_projection import (
    AnnualisationPolicy,
    BandProjection,
    ProjectionResult,
    annualise,
    clamp_open_weeks,
    project,
)
from funding_engines.entitlement import (
    CapStatus,
    ClaimantIssue,
    ClaimantValidationResult,
    FundedEditContext,
    band_allocated_hours,
    cap_status,
    clamp_funded_edit,
    update_claimant_count,
    validate_claimant_counts,
    weekly_cap_hours,
)
from funding_engines.grid_editing import (
    clear_funded,
    seed_projection_grid,
    set_cell_funded,
    set_cell_total,
)
from funding_engines.simplified_input import (
    SimplifiedCounts,
    expand_band,
    expand_simplified_to_grid,
)
from funding_engines.summary import (
    BandSummary,
    ResultsSummary,
    YearDrivers,
    summarize,
)
from funding_engines.tracer import compute_input_fingerprint, traced_engine
from funding_engines.weekly_revenue import (
    HoursBreakdown,
    WeeklyBreakdown,
    compute_weekly,
)

__all__ = [
    # Weekly revenue
    "HoursBreakdown",
    "WeeklyBreakdown",
    "compute_weekly",
    # Annual projection
    "AnnualisationPolicy",
    "BandProjection",
    "ProjectionResult",
    "annualise",
    "clamp_open_weeks",
    "project",
    # Entitlement caps
    "CapStatus",
    "ClaimantIssue",
    "ClaimantValidationResult",
    "FundedEditContext",
    "band_allocated_hours",
    "cap_status",
    "clamp_funded_edit",
    "update_claimant_count",
    "validate_claimant_counts",
    "weekly_cap_hours",
    # Grid editing
    "clear_funded",
    "seed_projection_grid",
    "set_cell_funded",
    "set_cell_total",
    # Simplified input
    "SimplifiedCounts",
    "expand_band",
    "expand_simplified_to_grid",
    # Results summary
    "BandSummary",
    "ResultsSummary",
    "YearDrivers",
    "summarize",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
