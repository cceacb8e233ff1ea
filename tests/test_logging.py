"""
Tests for funding_kernel.logging_config.

Covers:
- JSON line shape, extras and type rendering
- Exception fields, including FundingKernelError attributes
- LogContext set / bind / clear
- configure_logging idempotence and reset
"""

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO

import pytest

from funding_kernel.domain.codes import AgeBand, FundingMode, FundingYear
from funding_kernel.exceptions import InvalidScenarioError, UnknownCodeError
from funding_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def json_lines():
    """Configure logging onto a buffer; calling the fixture returns parsed lines."""
    stream = StringIO()
    configure_logging(stream=stream)

    def read() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    return read


class TestRecordShape:

    def test_core_fields(self, json_lines):
        get_logger("engines.weekly_revenue").info("weekly_revenue_computed")

        [record] = json_lines()
        assert record["message"] == "weekly_revenue_computed"
        assert record["level"] == "INFO"
        assert record["logger"] == "funding_kernel.engines.weekly_revenue"
        assert datetime.fromisoformat(record["ts"]).tzinfo is not None

    def test_extras_become_top_level_keys(self, json_lines):
        get_logger("t").info("projection_annualised", extra={"weeks": 51, "policy": "direct"})

        [record] = json_lines()
        assert (record["weeks"], record["policy"]) == (51, "direct")

    @pytest.mark.parametrize(
        "value, rendered",
        [
            (Decimal("198.823529411764691"), "198.823529411764691"),
            (AgeBand.TWO_TO_THREE, "2to3"),
            (FundingMode.MIXED, "MIXED"),
            (datetime(2025, 9, 1, 8, 30, tzinfo=UTC), "2025-09-01T08:30:00+00:00"),
            (frozenset(), "frozenset()"),
        ],
    )
    def test_values_rendered_as_json(self, json_lines, value, rendered):
        get_logger("t").info("typed", extra={"value": value})

        assert json_lines()[0]["value"] == rendered

    def test_levels_below_configured_are_dropped(self, json_lines):
        log = get_logger("t")
        log.debug("hidden")
        log.info("shown")
        log.warning("also_shown")

        assert [r["message"] for r in json_lines()] == ["shown", "also_shown"]

    def test_extra_cannot_override_core_fields(self, json_lines):
        LogContext.set(scenario_id="from-context")
        get_logger("t").info("clash", extra={"scenario_id": "from-extra"})

        assert json_lines()[0]["scenario_id"] == "from-context"


class TestExceptionFields:

    def test_plain_exception(self, json_lines):
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("t").exception("failed")

        [record] = json_lines()
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record
        assert "ValueError: boom" in record["traceback"]

    def test_invalid_scenario_attributes(self, json_lines):
        try:
            raise InvalidScenarioError("rates", "expected a mapping")
        except InvalidScenarioError:
            get_logger("config").error("scenario_rejected", exc_info=True)

        [record] = json_lines()
        assert record["exc_code"] == "INVALID_SCENARIO"
        assert record["exc_section"] == "rates"
        assert record["exc_reason"] == "expected a mapping"

    def test_unknown_code_attributes(self, json_lines):
        try:
            AgeBand.parse("5to6")
        except UnknownCodeError:
            get_logger("config").error("scenario_rejected", exc_info=True)

        [record] = json_lines()
        assert record["exc_code"] == "UNKNOWN_CODE"
        assert record["exc_type"] == "UnknownCodeError"


class TestLogContext:

    def test_fields_attached_to_records(self, json_lines):
        LogContext.set(scenario_id="sunny-days", funding_year=FundingYear.Y2526.value)
        get_logger("t").info("with_context")

        record = json_lines()[0]
        assert record["scenario_id"] == "sunny-days"
        assert record["funding_year"] == "2526"
        assert "nursery_id" not in record

    def test_set_is_additive(self):
        LogContext.set(correlation_id="a")
        LogContext.set(nursery_id="n-1")
        LogContext.set(correlation_id=None)

        assert LogContext.get_all() == {"correlation_id": "a", "nursery_id": "n-1"}

    def test_clear(self):
        LogContext.set(band="U2", scenario_id="s")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous_values(self):
        LogContext.set(band="U2")
        with LogContext.bind(band="3to4", scenario_id="inner"):
            assert LogContext.get_all() == {"band": "3to4", "scenario_id": "inner"}
        assert LogContext.get_all() == {"band": "U2"}

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(nursery_id="n-9"):
                raise RuntimeError("inside")
        assert LogContext.get_all() == {}

    def test_bind_skips_unknown_and_none(self):
        with LogContext.bind(not_a_field="x", band=None, funding_year="2425"):
            assert LogContext.get_all() == {"funding_year": "2425"}

    def test_field_names(self):
        assert LogContext.FIELDS == (
            "correlation_id", "scenario_id", "nursery_id", "band", "funding_year",
        )


class TestConfigureLogging:

    def test_second_call_is_ignored(self, json_lines):
        other = StringIO()
        configure_logging(stream=other)
        get_logger("t").info("once")

        # pytest may attach its own capture handlers; count only ours
        ours = [
            h for h in logging.getLogger("funding_kernel").handlers
            if isinstance(h.formatter, StructuredFormatter)
        ]
        assert len(ours) == 1
        assert other.getvalue() == ""
        assert len(json_lines()) == 1

    def test_explicit_handler(self):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested").debug("via_handler")

        assert isinstance(handler.formatter, StructuredFormatter)
        assert json.loads(stream.getvalue())["logger"] == "funding_kernel.deep.nested"

    def test_reset_then_reconfigure(self):
        configure_logging(stream=StringIO())
        reset_logging()
        root = logging.getLogger("funding_kernel")
        assert root.handlers == []
        assert root.propagate is True

        stream = StringIO()
        configure_logging(stream=stream)
        get_logger("t").info("after_reset")
        assert json.loads(stream.getvalue())["message"] == "after_reset"
