"""
funding_engines.grid_editing -- The update paths for attendance-grid edits.

Responsibility:
    Apply a single-cell edit to a ``WeekGrid`` and return the new grid.
    These are the only documented ways the grid-editing surface changes a
    cell, and together they preserve ``funded <= total`` for every cell.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on ``funding_engines.entitlement`` for the 25/26 cap clamp.

Invariants enforced:
    - ``funded <= total`` after every edit.
    - A ``total`` edit re-clamps that cell's funded count to the new total
      but never re-validates the weekly cap.
    - A ``funded`` edit is clamped by ``clamp_funded_edit``.
    - Only the edited band's row is rebuilt; other bands are shared.
    - ``clear_funded`` keeps every total and leaves funded at zero.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from funding_kernel.domain.codes import AgeBand, Day, SessionType
from funding_kernel.domain.grid import EMPTY_WEEK, AttendanceCell, WeekGrid
from funding_kernel.domain.values import to_units
from funding_kernel.logging_config import get_logger
from funding_engines.entitlement import FundedEditContext, clamp_funded_edit

logger = get_logger("engines.grid_editing")


def set_cell_total(
    grid: WeekGrid,
    band: AgeBand,
    day: Day,
    session: SessionType,
    value: Any,
) -> WeekGrid:
    """Set a cell's total places; funded is re-clamped to the new total."""
    previous = grid.cell(band, day, session).normalized()
    new_total = to_units(value)
    cell = AttendanceCell(total=new_total, funded=min(previous.funded, new_total))
    return grid.with_cell(band, day, session, cell)


def set_cell_funded(
    grid: WeekGrid,
    band: AgeBand,
    day: Day,
    session: SessionType,
    value: Any,
    context: FundedEditContext | None = None,
) -> WeekGrid:
    """
    Set a cell's funded places, clamped to its total and the band's cap.

    ``context`` supplies cap inputs; when omitted (or its caps are
    inactive) only the ``funded <= total`` clamp applies.  The context's
    grid is replaced by ``grid`` so the clamp always sees the grid being
    edited.
    """
    if context is None:
        context = FundedEditContext(grid=grid)
    elif context.grid is not grid:
        context = replace(context, grid=grid)

    allowed = clamp_funded_edit(
        band=band,
        day=day,
        session=session,
        proposed_units=value,
        context=context,
    )
    previous = grid.cell(band, day, session).normalized()
    return grid.with_cell(band, day, session, AttendanceCell(total=previous.total, funded=allowed))


def seed_projection_grid(grid_2425: WeekGrid) -> WeekGrid:
    """
    Starting 25/26 grid: the 24/25 baseline with every cell normalised.

    Users then adjust funded places on the 25/26 grid; totals are carried
    over unchanged.
    """
    seeded = grid_2425
    for band in AgeBand:
        for day, session, cell in grid_2425.band(band).cells():
            normal = cell.normalized()
            if normal != cell:
                seeded = seeded.with_cell(band, day, session, normal)
    logger.debug("projection_grid_seeded")
    return seeded


def clear_funded(grid: WeekGrid, bands: Iterable[AgeBand] | None = None) -> WeekGrid:
    """
    Zero every funded count in ``bands`` (all bands when omitted).

    Totals are kept, so each cleared place becomes a paid place.
    """
    cleared = grid
    selected = AgeBand.ordered(bands) if bands is not None else tuple(AgeBand)
    for band in selected:
        week = EMPTY_WEEK
        for day, session, cell in grid.band(band).cells():
            week = week.with_cell(day, session, AttendanceCell(total=cell.normalized().total))
        cleared = cleared.with_band(band, week)
    logger.info("funded_places_cleared", extra={"bands": [b.value for b in selected]})
    return cleared
