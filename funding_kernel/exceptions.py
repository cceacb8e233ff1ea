"""
Typed exception hierarchy for the funding calculator.

The calculation engines are total functions and never raise: malformed
numbers coerce to zero and annualisation falls back to direct
multiplication.  Exceptions exist only where structured input enters the
system (enum code parsing and YAML scenario loading), so callers can catch
by type and report ``code`` instead of parsing messages.

    FundingKernelError (base)
    |
    +-- ConfigurationError
        +-- UnknownCodeError
        +-- InvalidScenarioError

Category        | Code               | When Raised
----------------|--------------------|----------------------------------------
Configuration   | UNKNOWN_CODE       | Band/day/session/mode/method/year code
                |                    | not recognised
                | INVALID_SCENARIO   | Scenario section has the wrong shape
"""


class FundingKernelError(Exception):
    """
    Base exception for all funding calculator errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "FUNDING_KERNEL_ERROR"


class ConfigurationError(FundingKernelError):
    """Base exception for configuration and input-structure errors."""

    code: str = "CONFIGURATION_ERROR"


class UnknownCodeError(ConfigurationError):
    """An enumerated code (age band, day, session, ...) was not recognised."""

    code: str = "UNKNOWN_CODE"

    def __init__(self, kind: str, value: object, allowed: tuple[str, ...]):
        self.kind = kind
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Unknown {kind} code {value!r}; expected one of {', '.join(allowed)}"
        )


class InvalidScenarioError(ConfigurationError):
    """A scenario document section does not have the expected structure."""

    code: str = "INVALID_SCENARIO"

    def __init__(self, section: str, reason: str):
        self.section = section
        self.reason = reason
        super().__init__(f"Invalid scenario section '{section}': {reason}")
