"""
Funding Kernel

Domain types, numeric coercion, typed errors and structured logging for
the childcare funding-impact calculator:
- Age bands, weekdays and session types as enumerations
- Immutable attendance grids indexed by band, day and session
- Decimal-only amounts with non-finite-safe coercion
"""

__version__ = "0.1.0"
