"""
Tests for the annual projection engine.

Covers:
- Open-weeks clamping
- Snapshot-and-scale annualisation
- Direct annualisation fallback
- Per-band aggregation and ordering
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from funding_engines.annual_projection import (
    MAX_OPEN_WEEKS,
    MIN_OPEN_WEEKS,
    AnnualisationPolicy,
    BandProjection,
    ProjectionResult,
    annualise,
    clamp_open_weeks,
    project,
)
from funding_engines.weekly_revenue import WeeklyBreakdown
from funding_kernel.domain.codes import AgeBand, AnnualisationMethod, FundingYear, SessionType
from funding_kernel.domain.inputs import AnnualisationConfig, CalculatorInputs, RateConfig


class TestClampOpenWeeks:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (60, 52),
            (51, 51),
            (38, 38),
            (10, 38),
            (0, 38),
            ("45", 45),
            ("45.9", 45),
            (None, 51),
            ("", 51),
            ("many", 51),
            (float("nan"), 51),
        ],
    )
    def test_clamped_into_range(self, raw, expected):
        assert clamp_open_weeks(raw) == expected

    def test_bounds(self):
        assert (MIN_OPEN_WEEKS, MAX_OPEN_WEEKS) == (38, 52)


class TestAnnualise:

    def test_snapshot_returns_actual_exactly(self):
        config = AnnualisationConfig(
            method=AnnualisationMethod.SNAPSHOT,
            annual_2425_actual=Decimal("250000"),
            open_weeks=50,
        )

        revenue_2425, revenue_2526, weeks, policy, k = annualise(
            Decimal("5000"), Decimal("5500"), config,
        )

        assert revenue_2425 == Decimal("250000")
        assert weeks == 50
        assert policy is AnnualisationPolicy.SNAPSHOT_SCALE
        assert k == Decimal("1")
        assert revenue_2526 == Decimal("275000")

    def test_snapshot_scales_projection(self):
        config = AnnualisationConfig(annual_2425_actual=Decimal("204000"), open_weeks=51)

        revenue_2425, revenue_2526, _, _, k = annualise(Decimal("5000"), Decimal("6000"), config)

        # k = 204000 / (5000 x 51) = 0.8
        assert k == Decimal("0.8")
        assert revenue_2425 == Decimal("204000")
        assert revenue_2526 == Decimal("244800")

    def test_estimated_method_also_scales(self):
        config = AnnualisationConfig(
            method=AnnualisationMethod.ESTIMATED, annual_2425_actual=Decimal("100000"),
        )
        _, _, _, policy, _ = annualise(Decimal("2000"), Decimal("2000"), config)
        assert policy is AnnualisationPolicy.SNAPSHOT_SCALE

    @pytest.mark.parametrize("actual", [None, Decimal("0"), Decimal("-5")])
    def test_missing_actual_falls_back_to_direct(self, actual):
        config = AnnualisationConfig(annual_2425_actual=actual, open_weeks=51)

        revenue_2425, revenue_2526, weeks, policy, k = annualise(
            Decimal("1000"), Decimal("1100"), config,
        )

        assert policy is AnnualisationPolicy.DIRECT
        assert k is None
        assert revenue_2425 == Decimal("51000")
        assert revenue_2526 == Decimal("56100")

    def test_zero_baseline_week_falls_back_to_direct(self):
        config = AnnualisationConfig(annual_2425_actual=Decimal("100000"), open_weeks=40)

        revenue_2425, revenue_2526, _, policy, _ = annualise(Decimal("0"), Decimal("900"), config)

        assert policy is AnnualisationPolicy.DIRECT
        assert revenue_2425 == Decimal("0")
        assert revenue_2526 == Decimal("36000")

    def test_unset_method_falls_back_to_direct(self):
        config = AnnualisationConfig(method=None, annual_2425_actual=Decimal("100000"))
        _, _, _, policy, _ = annualise(Decimal("1000"), Decimal("1000"), config)
        assert policy is AnnualisationPolicy.DIRECT

    def test_missing_config_uses_defaults(self):
        revenue_2425, _, weeks, policy, _ = annualise(Decimal("10"), Decimal("10"), None)
        assert weeks == 51
        assert policy is AnnualisationPolicy.DIRECT
        assert revenue_2425 == Decimal("510")


class TestProject:
    """End-to-end projection from CalculatorInputs."""

    def test_direct_projection(self, three_to_four_inputs):
        inputs = replace(three_to_four_inputs, annualisation=AnnualisationConfig(open_weeks=51))

        result = project(inputs=inputs)

        # weekly: funded 330 + paid 5 x 37.50
        assert result.weekly_2425 == Decimal("517.5")
        assert result.weekly_2526 == Decimal("517.5")
        assert result.revenue_2425 == Decimal("517.5") * 51
        assert result.delta_annual == Decimal("0")
        assert result.delta_weekly == Decimal("0")
        assert result.policy is AnnualisationPolicy.DIRECT

    def test_open_weeks_above_range_clamped(self, three_to_four_inputs):
        inputs = replace(three_to_four_inputs, annualisation=AnnualisationConfig(open_weeks=60))

        result = project(inputs=inputs)

        assert result.weeks == 52
        assert result.revenue_2425 == Decimal("517.5") * 52

    def test_rate_change_drives_delta(self, three_to_four_inputs):
        inputs = replace(
            three_to_four_inputs,
            rates_2526=RateConfig.of({"3to4": "6.80"}),
            annualisation=AnnualisationConfig(open_weeks=50),
        )

        result = project(inputs=inputs)

        # 50 funded hours x 1.00 more per hour
        band = result.by_band[AgeBand.THREE_TO_FOUR]
        assert band.weekly_change == Decimal("50")
        assert result.delta_annual == Decimal("2500")
        assert result.delta_weekly == Decimal("50")

    def test_snapshot_keeps_actual(self, three_to_four_inputs):
        inputs = replace(
            three_to_four_inputs,
            annualisation=AnnualisationConfig(annual_2425_actual=Decimal("31050"), open_weeks=50),
        )

        result = project(inputs=inputs)

        assert result.revenue_2425 == Decimal("31050")
        assert result.policy is AnnualisationPolicy.SNAPSHOT_SCALE
        assert result.delta_annual == result.revenue_2526 - result.revenue_2425

    def test_by_band_in_display_order(self):
        inputs = CalculatorInputs(
            age_bands=frozenset({AgeBand.THREE_TO_FOUR, AgeBand.U2, AgeBand.TWO_TO_THREE}),
        )

        result = project(inputs=inputs)

        assert list(result.by_band) == [AgeBand.U2, AgeBand.TWO_TO_THREE, AgeBand.THREE_TO_FOUR]

    def test_by_band_is_read_only(self):
        result = project(inputs=CalculatorInputs(age_bands=frozenset({AgeBand.U2})))

        with pytest.raises(TypeError):
            result.by_band[AgeBand.U2] = None

    def test_by_band_detached_from_caller_dict(self):
        source = {AgeBand.U2: BandProjection(AgeBand.U2, WeeklyBreakdown(), WeeklyBreakdown())}
        result = ProjectionResult(by_band=source)

        source.clear()

        assert list(result.by_band) == [AgeBand.U2]
        assert ProjectionResult().by_band == {}

    def test_empty_inputs_give_zero_result(self):
        result = project(inputs=CalculatorInputs(age_bands=frozenset()))

        assert result.by_band == {}
        assert result.revenue_2425 == Decimal("0")
        assert result.revenue_2526 == Decimal("0")
        assert result.weeks == 51

    def test_unselected_band_ignored(self, three_to_four_inputs, fill_band):
        grid = fill_band(
            three_to_four_inputs.grid_2526, AgeBand.U2, SessionType.FD, total=4, funded=0,
        )
        inputs = three_to_four_inputs.with_grid(FundingYear.Y2526, grid)

        result = project(inputs=inputs)

        assert AgeBand.U2 not in result.by_band
        assert result.weekly_2526 == result.weekly_2425

    def test_logs_annualisation(self, captured_logs, three_to_four_inputs):
        project(inputs=three_to_four_inputs)

        records = [r for r in captured_logs() if r["message"] == "projection_annualised"]
        assert len(records) == 1
        assert records[0]["policy"] == "direct"
        assert records[0]["weeks"] == 51
        assert records[0]["bands"] == ["3to4"]

    def test_emits_engine_trace(self, captured_logs, three_to_four_inputs):
        project(inputs=three_to_four_inputs)

        traces = [
            r for r in captured_logs()
            if r["message"] == "FUNDING_ENGINE_TRACE" and r["engine_name"] == "annual_projection"
        ]
        assert len(traces) == 1
        assert len(traces[0]["input_fingerprint"]) == 16
