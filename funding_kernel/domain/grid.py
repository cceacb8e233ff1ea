"""
Weekly attendance grid.

A ``WeekGrid`` covers one funding year: three age bands, each with a
``BandWeek`` of five weekdays by three session types.  The structure is a
fixed 3 x 5 x 3 arrangement of tuples indexed by enum position, so every
cell always exists (unset cells are zero) and nothing can be keyed by an
unknown code.

Edits never mutate: ``with_cell`` builds one new cell, one new day row and
one new ``BandWeek``; every other row and band is shared with the source
grid.

Invariant ``funded <= total`` is enforced on the write path
(``AttendanceCell.of``).  Readers re-assert it through ``normalized()``
because a grid may be built directly from untrusted data.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from funding_kernel.domain.codes import AgeBand, Day, SessionType
from funding_kernel.domain.values import to_units


@dataclass(frozen=True, slots=True)
class AttendanceCell:
    """
    Weekly places booked for one (band, day, session) slot.

    ``total`` is the number of children booked; ``funded`` is how many of
    those places are claimed against government funding.
    """

    total: int = 0
    funded: int = 0

    @classmethod
    def of(cls, total: Any, funded: Any) -> AttendanceCell:
        """Build a cell from raw input, coercing and clamping funded to total."""
        safe_total = to_units(total)
        return cls(total=safe_total, funded=min(to_units(funded), safe_total))

    def normalized(self) -> AttendanceCell:
        return AttendanceCell.of(self.total, self.funded)

    @property
    def paid(self) -> int:
        """Places paid privately (never negative)."""
        cell = self.normalized()
        return cell.total - cell.funded


EMPTY_CELL = AttendanceCell()

_EMPTY_ROW: tuple[AttendanceCell, ...] = (EMPTY_CELL,) * len(SessionType)
_EMPTY_ROWS: tuple[tuple[AttendanceCell, ...], ...] = (_EMPTY_ROW,) * len(Day)


@dataclass(frozen=True, slots=True)
class BandWeek:
    """Five weekday rows of FD/AM/PM cells for a single age band."""

    rows: tuple[tuple[AttendanceCell, ...], ...] = _EMPTY_ROWS

    def cell(self, day: Day, session: SessionType) -> AttendanceCell:
        return self.rows[day.position][session.position]

    def with_cell(
        self, day: Day, session: SessionType, cell: AttendanceCell
    ) -> BandWeek:
        row = list(self.rows[day.position])
        row[session.position] = cell
        rows = list(self.rows)
        rows[day.position] = tuple(row)
        return BandWeek(rows=tuple(rows))

    def cells(self) -> Iterator[tuple[Day, SessionType, AttendanceCell]]:
        """Yield every cell in day-major, session-minor order."""
        for day in Day:
            for session in SessionType:
                yield day, session, self.cell(day, session)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> BandWeek:
        """
        Build from ``{day: {session: {"total": n, "funded": m}}}``.

        Unknown day or session codes raise ``UnknownCodeError``; missing
        days, sessions or values default to zero.
        """
        week = EMPTY_WEEK
        if not isinstance(data, Mapping):
            return week
        for day_code, sessions in data.items():
            day = Day.parse(day_code)
            if not isinstance(sessions, Mapping):
                continue
            for session_code, raw in sessions.items():
                session = SessionType.parse(session_code)
                if not isinstance(raw, Mapping):
                    continue
                week = week.with_cell(
                    day, session, AttendanceCell.of(raw.get("total"), raw.get("funded"))
                )
        return week

    def to_mapping(self) -> dict[str, dict[str, dict[str, int]]]:
        return {
            day.value: {
                session.value: {
                    "total": self.cell(day, session).total,
                    "funded": self.cell(day, session).funded,
                }
                for session in SessionType
            }
            for day in Day
        }


EMPTY_WEEK = BandWeek()


@dataclass(frozen=True, slots=True)
class WeekGrid:
    """Attendance for every age band in one funding year."""

    weeks: tuple[BandWeek, ...] = (EMPTY_WEEK,) * len(AgeBand)

    def band(self, band: AgeBand) -> BandWeek:
        return self.weeks[band.position]

    def cell(self, band: AgeBand, day: Day, session: SessionType) -> AttendanceCell:
        return self.band(band).cell(day, session)

    def with_band(self, band: AgeBand, week: BandWeek) -> WeekGrid:
        weeks = list(self.weeks)
        weeks[band.position] = week
        return WeekGrid(weeks=tuple(weeks))

    def with_cell(
        self,
        band: AgeBand,
        day: Day,
        session: SessionType,
        cell: AttendanceCell,
    ) -> WeekGrid:
        return self.with_band(band, self.band(band).with_cell(day, session, cell))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> WeekGrid:
        """Build from ``{band: {day: {session: {"total", "funded"}}}}``."""
        grid = EMPTY_GRID
        if not isinstance(data, Mapping):
            return grid
        for band_code, week in data.items():
            grid = grid.with_band(AgeBand.parse(band_code), BandWeek.from_mapping(week))
        return grid

    def to_mapping(self) -> dict[str, Any]:
        return {band.value: self.band(band).to_mapping() for band in AgeBand}


EMPTY_GRID = WeekGrid()


def empty_grid() -> WeekGrid:
    """An all-zero grid (every band, day and session present)."""
    return EMPTY_GRID
