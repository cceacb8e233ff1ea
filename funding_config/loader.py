"""
Scenario Loader (``funding_config.loader``).

Responsibility
--------------
Loads YAML scenario files and parses them into the frozen kernel types
(``SessionTable``, ``RateConfig``, ``ExtrasConfig``, ``ClaimantCounts``,
``AnnualisationConfig``, ``WeekGrid``) and finally a ``CalculatorInputs``
snapshot.  A scenario is overlaid on the packaged defaults, so a file only
needs the sections it changes.

Architecture position
---------------------
**Config layer** -- sits above ``funding_kernel`` and ``funding_engines``.
The public entry points are ``funding_config.get_default_inputs()`` and
``funding_config.load_scenario()``; callers should not need this module
directly.

Invariants enforced
-------------------
* Enumerated codes (bands, days, sessions, years, modes, methods) are
  strict: an unknown code raises ``UnknownCodeError``.
* Numeric values are lenient: anything unparseable reads as zero, the
  same policy the engines apply.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  merged scenario document.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Section with the wrong shape  -> ``InvalidScenarioError``.
* Unknown code  -> ``UnknownCodeError``.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from funding_kernel.domain.codes import (
    AgeBand,
    AnnualisationMethod,
    FundingMode,
    FundingYear,
)
from funding_kernel.domain.grid import WeekGrid
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
from funding_kernel.domain.values import non_negative
from funding_kernel.exceptions import InvalidScenarioError
from funding_engines.simplified_input import expand_simplified_to_grid

INPUT_MODE_DETAILED = "detailed"
INPUT_MODE_SIMPLIFIED = "simplified"
_INPUT_MODES = (INPUT_MODE_DETAILED, INPUT_MODE_SIMPLIFIED)
_YEAR_SECTIONS = ("rates", "extras", "grids")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidScenarioError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidScenarioError(str(path), "document must be a mapping")
    return data


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any] | None:
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise InvalidScenarioError(name, f"expected a mapping, got {type(value).__name__}")
    return value


def _is_year_keyed(data: Mapping[Any, Any]) -> bool:
    years = {y.value for y in FundingYear}
    return bool(data) and all(str(k) in years for k in data)


def _per_year(data: Mapping[str, Any] | None, name: str) -> dict[FundingYear, Any]:
    """
    Split a section into per-year payloads.

    A section keyed by ``"2425"`` / ``"2526"`` is split; anything else
    applies to both years.
    """
    if data is None:
        return {}
    if _is_year_keyed(data):
        result: dict[FundingYear, Any] = {}
        for key, value in data.items():
            if value is not None and not isinstance(value, Mapping):
                raise InvalidScenarioError(f"{name}.{key}", "expected a mapping")
            result[FundingYear.parse(str(key))] = value
        return result
    return {year: data for year in FundingYear}


def parse_session_table(
    data: Mapping[str, Any] | None,
    default: SessionTable | None = None,
) -> SessionTable:
    """Parse ``{FD: x, AM: y, PM: z}``; absent sessions keep ``default``."""
    return SessionTable.of(data, default)


def parse_rates(data: Mapping[str, Any] | None) -> RateConfig:
    """Parse ``{band: rate}`` or ``{band: {total_rate: rate}}`` for one year."""
    return RateConfig.of(data)


def parse_extras(data: Mapping[str, Any] | None) -> ExtrasConfig:
    return ExtrasConfig.of(data)


def parse_claimant_counts(data: Mapping[str, Any] | None) -> dict[AgeBand, ClaimantCounts]:
    """Parse ``{band: {fifteen_stretched: n, ...}}``."""
    counts: dict[AgeBand, ClaimantCounts] = {}
    if data is None:
        return counts
    for code, raw in data.items():
        band = AgeBand.parse(code)
        if not isinstance(raw, Mapping):
            raise InvalidScenarioError(f"claimant_counts.{code}", "expected a mapping")
        counts[band] = ClaimantCounts.of(raw)
    return counts


def parse_funding_modes(data: Mapping[str, Any] | None) -> dict[AgeBand, FundingMode]:
    if data is None:
        return {}
    return {AgeBand.parse(code): FundingMode.parse(mode) for code, mode in data.items()}


def parse_annualisation(data: Mapping[str, Any] | None) -> AnnualisationConfig:
    """
    Parse the annualisation section.

    ``open_weeks`` is kept as supplied; the projector clamps it.  An empty
    or non-positive ``annual_2425_actual`` reads as "not supplied".
    """
    if data is None:
        return AnnualisationConfig()
    method_raw = data.get("method")
    method = (
        AnnualisationMethod.parse(method_raw)
        if method_raw is not None
        else AnnualisationMethod.SNAPSHOT
    )
    actual = non_negative(data.get("annual_2425_actual"))
    return AnnualisationConfig(
        method=method,
        annual_2425_actual=actual if actual > 0 else None,
        open_weeks=data.get("open_weeks", DEFAULT_OPEN_WEEKS),
    )


def parse_age_bands(value: Any) -> frozenset[AgeBand]:
    if value is None:
        return frozenset(AgeBand)
    if not isinstance(value, (list, tuple)):
        raise InvalidScenarioError("age_bands", "expected a list of band codes")
    return frozenset(AgeBand.parse(code) for code in value)


def _parse_grids(data: Mapping[str, Any]) -> tuple[WeekGrid, WeekGrid]:
    mode = data.get("input_mode", INPUT_MODE_DETAILED)
    if mode not in _INPUT_MODES:
        raise InvalidScenarioError("input_mode", f"expected one of {', '.join(_INPUT_MODES)}")

    if mode == INPUT_MODE_SIMPLIFIED:
        simplified = _section(data, "simplified") or {}
        grid = expand_simplified_to_grid(
            simplified_counts={AgeBand.parse(code): raw for code, raw in simplified.items()},
        )
        return grid, grid

    grids = _per_year(_section(data, "grids"), "grids")
    return (
        WeekGrid.from_mapping(grids.get(FundingYear.Y2425)),
        WeekGrid.from_mapping(grids.get(FundingYear.Y2526)),
    )


def parse_inputs(
    data: Mapping[str, Any],
    defaults: Mapping[str, Any] | None = None,
) -> CalculatorInputs:
    """
    Parse a scenario document into ``CalculatorInputs``.

    ``data`` is first overlaid on ``defaults`` (see ``resolve_scenario``).

    Raises:
        InvalidScenarioError: if a section has the wrong shape.
        UnknownCodeError: if a code is not recognised.
    """
    merged = resolve_scenario(data, defaults)

    rates = _per_year(_section(merged, "rates"), "rates")
    extras = _per_year(_section(merged, "extras"), "extras")
    grid_2425, grid_2526 = _parse_grids(merged)

    return CalculatorInputs(
        age_bands=parse_age_bands(merged.get("age_bands")),
        grid_2425=grid_2425,
        grid_2526=grid_2526,
        session_hours=parse_session_table(_section(merged, "session_hours"), DEFAULT_SESSION_HOURS),
        private_fees=parse_session_table(_section(merged, "private_fees")),
        rates_2425=parse_rates(rates.get(FundingYear.Y2425)),
        rates_2526=parse_rates(rates.get(FundingYear.Y2526)),
        extras_2425=parse_extras(extras.get(FundingYear.Y2425)),
        extras_2526=parse_extras(extras.get(FundingYear.Y2526)),
        annualisation=parse_annualisation(_section(merged, "annualisation")),
        claimant_counts=parse_claimant_counts(_section(merged, "claimant_counts")),
        mode_by_band=parse_funding_modes(_section(merged, "funding_modes")),
        enforce_caps=bool(merged.get("enforce_caps", True)),
    )


def normalise_year_sections(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Key every per-year section (rates, extras, grids) by year code.

    A section written once for both years is duplicated under ``"2425"``
    and ``"2526"``; year keys written as bare YAML integers become strings.
    """
    normalised: dict[str, Any] = dict(data)
    for name in _YEAR_SECTIONS:
        section = _section(data, name)
        if section is None:
            continue
        normalised[name] = {year.value: value for year, value in _per_year(section, name).items()}
    return normalised


def resolve_scenario(
    data: Mapping[str, Any],
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """The scenario document overlaid on ``defaults``, year sections normalised."""
    return merge_scenario(
        normalise_year_sections(defaults or {}),
        normalise_year_sections(data),
    )


def merge_scenario(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """
    Overlay ``overlay`` on ``base``.

    Nested mappings merge key by key; any other value (lists included)
    replaces the base value.
    """
    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_scenario(current, value)
        else:
            merged[key] = value
    return merged


def compute_checksum(data: Mapping[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
