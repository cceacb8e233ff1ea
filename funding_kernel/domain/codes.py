"""
Enumerated codes used throughout the calculator.

Values match the codes used by the calculator forms and scenario files
(``U2``, ``2to3``, ``Monday``, ``FD``, ``2526``, ``STRETCHED`` ...).
``parse`` accepts a member, its value or its name and raises
``UnknownCodeError`` for anything else.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from funding_kernel.exceptions import UnknownCodeError


class CodedEnum(str, Enum):
    """String enum with strict parsing from form / YAML codes."""

    @classmethod
    def kind(cls) -> str:
        return cls.__name__

    @classmethod
    def parse(cls, value: object) -> CodedEnum:
        if isinstance(value, cls):
            return value
        for member in cls:
            if value == member.value or value == member.name:
                return member
        raise UnknownCodeError(cls.kind(), value, tuple(m.value for m in cls))

    @property
    def position(self) -> int:
        """Position in declaration order (fixed-size grid index)."""
        return tuple(type(self)).index(self)


class AgeBand(CodedEnum):
    """Cohort of children. Declaration order is display order."""

    U2 = "U2"
    TWO_TO_THREE = "2to3"
    THREE_TO_FOUR = "3to4"

    @classmethod
    def kind(cls) -> str:
        return "age band"

    @property
    def label(self) -> str:
        return _BAND_LABELS[self]

    @classmethod
    def ordered(cls, bands: Iterable[object]) -> tuple[AgeBand, ...]:
        """Parse a selection and return it in fixed display order."""
        selected = {cls.parse(b) for b in bands}
        return tuple(b for b in cls if b in selected)


_BAND_LABELS = {
    AgeBand.U2: "0-2 years",
    AgeBand.TWO_TO_THREE: "2-3 years",
    AgeBand.THREE_TO_FOUR: "3-4 years",
}


class Day(CodedEnum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"

    @classmethod
    def kind(cls) -> str:
        return "day"


class SessionType(CodedEnum):
    """Bookable session. FD is a full-day unit; AM and PM are half-day units."""

    FD = "FD"
    AM = "AM"
    PM = "PM"

    @classmethod
    def kind(cls) -> str:
        return "session"

    @property
    def is_full_day(self) -> bool:
        return self is SessionType.FD

    @property
    def is_half_day(self) -> bool:
        return self in (SessionType.AM, SessionType.PM)


class FundingYear(CodedEnum):
    Y2425 = "2425"
    Y2526 = "2526"

    @classmethod
    def kind(cls) -> str:
        return "funding year"


class FundingMode(CodedEnum):
    """Which claimant-count fields feed a band's 25/26 weekly cap."""

    STRETCHED = "STRETCHED"
    TERMTIME = "TERMTIME"
    MIXED = "MIXED"

    @classmethod
    def kind(cls) -> str:
        return "funding mode"

    @property
    def includes_stretched(self) -> bool:
        return self in (FundingMode.STRETCHED, FundingMode.MIXED)

    @property
    def includes_term_time(self) -> bool:
        return self in (FundingMode.TERMTIME, FundingMode.MIXED)


class AnnualisationMethod(CodedEnum):
    """How the user supplied the 24/25 annual figure."""

    SNAPSHOT = "snapshot"  # actual revenue known
    ESTIMATED = "estimated"  # best estimate

    @classmethod
    def kind(cls) -> str:
        return "annualisation method"
