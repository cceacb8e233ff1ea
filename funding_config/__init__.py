"""
funding_config -- public entrypoint for calculator scenarios.

Responsibility:
    Provides the two ways to obtain a ``CalculatorInputs`` snapshot from
    configuration: ``get_default_inputs()`` for the calculator's initial
    state and ``load_scenario(path)`` for a YAML scenario file overlaid on
    those defaults.

Architecture position:
    Configuration -- YAML-driven inputs.  This package sits above
    ``funding_kernel`` and ``funding_engines``; the kernel and engines
    MUST NEVER import from ``funding_config``.

Invariants enforced:
    - Every scenario is resolved against the packaged defaults
      (``sets/defaults.yaml``) before parsing.
    - Deterministic resolution: the same files always produce the same
      merged document and checksum.

Failure modes:
    - ``FileNotFoundError`` -- scenario file does not exist.
    - ``yaml.YAMLError`` -- scenario file is not valid YAML.
    - ``InvalidScenarioError`` -- a section has the wrong shape.
    - ``UnknownCodeError`` -- a band, day, session, year, mode or method
      code is not recognised.

Audit relevance:
    Every successful call emits a ``FUNDING_CONFIG_TRACE`` log entry with
    the scenario id, checksum of the merged document, input mode and band
    selection, tying a projection back to the exact inputs that produced
    it.  A non-empty ``nursery_name`` is bound as the ``nursery_id`` log
    context field for the duration of the load.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from funding_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_inputs,
    resolve_scenario,
)
from funding_kernel.domain.inputs import CalculatorInputs
from funding_kernel.logging_config import LogContext, get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
_DEFAULTS_FILE = "defaults.yaml"


def _load_defaults(config_dir: Path | None) -> dict[str, Any]:
    return load_yaml_file((config_dir or _DEFAULT_CONFIG_DIR) / _DEFAULTS_FILE)


def _build(document: Mapping[str, Any], source: str, scenario_id: str) -> CalculatorInputs:
    checksum = compute_checksum(document)

    nursery = str(document.get("nursery_name") or "").strip() or None
    with LogContext.bind(scenario_id=scenario_id, nursery_id=nursery):
        inputs = parse_inputs(document)
        _logger.info(
            "FUNDING_CONFIG_TRACE",
            extra={
                "trace_type": "FUNDING_CONFIG_TRACE",
                "source": source,
                "checksum": checksum,
                "input_mode": document.get("input_mode"),
                "age_bands": [b.value for b in inputs.ordered_bands],
                "enforce_caps": inputs.enforce_caps,
            },
        )
    return inputs


def get_default_inputs(config_dir: Path | None = None) -> CalculatorInputs:
    """The calculator's initial state.

    Args:
        config_dir: Override path to the configuration sets directory.
            Defaults to funding_config/sets/.
    """
    defaults = _load_defaults(config_dir)
    return _build(
        resolve_scenario(defaults),
        source=_DEFAULTS_FILE,
        scenario_id=str(defaults.get("scenario_id") or "defaults"),
    )


def load_scenario(path: Path | str, config_dir: Path | None = None) -> CalculatorInputs:
    """Load a YAML scenario and overlay it on the packaged defaults.

    Args:
        path: Scenario YAML file.
        config_dir: Override path to the configuration sets directory
            holding ``defaults.yaml``.

    Returns:
        CalculatorInputs for the merged scenario.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        yaml.YAMLError: If ``path`` is not valid YAML.
        InvalidScenarioError: If a section has the wrong shape.
        UnknownCodeError: If a code is not recognised.
    """
    scenario_path = Path(path)
    scenario = load_yaml_file(scenario_path)
    document = resolve_scenario(scenario, _load_defaults(config_dir))
    return _build(
        document,
        source=scenario_path.name,
        scenario_id=str(scenario.get("scenario_id") or scenario_path.stem),
    )


__all__ = [
    "get_default_inputs",
    "load_scenario",
]
