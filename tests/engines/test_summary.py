"""Tests for the results summary (weekly drivers, headline and band rows)."""

from dataclasses import replace
from decimal import Decimal

from funding_engines.annual_projection import BandProjection, ProjectionResult, project
from funding_engines.summary import summarize
from funding_engines.weekly_revenue import HoursBreakdown, WeeklyBreakdown
from funding_kernel.domain.codes import AgeBand
from funding_kernel.domain.inputs import AnnualisationConfig, CalculatorInputs, RateConfig


def _result(before: WeeklyBreakdown, after: WeeklyBreakdown, weeks: int = 50) -> ProjectionResult:
    revenue_2425 = before.total * weeks
    revenue_2526 = after.total * weeks
    return ProjectionResult(
        revenue_2425=revenue_2425,
        revenue_2526=revenue_2526,
        delta_annual=revenue_2526 - revenue_2425,
        delta_weekly=after.total - before.total,
        by_band={AgeBand.U2: BandProjection(AgeBand.U2, before, after)},
        weeks=weeks,
        weekly_2425=before.total,
        weekly_2526=after.total,
    )


class TestDrivers:

    def test_totals_and_deltas(self, three_to_four_inputs):
        inputs = replace(
            three_to_four_inputs,
            rates_2526=RateConfig.of({"3to4": "6.80"}),
            annualisation=AnnualisationConfig(open_weeks=50),
        )

        summary = summarize(result=project(inputs=inputs))

        assert summary.drivers_2425.funded == Decimal("330")
        assert summary.drivers_2526.funded == Decimal("380")
        assert summary.drivers_2425.paid == Decimal("187.5")
        assert summary.funded_delta == Decimal("50")
        assert summary.paid_delta == Decimal("0")
        assert summary.hours_delta == Decimal("0")
        assert summary.weekly_delta == Decimal("50")

    def test_headline_pct(self):
        before = WeeklyBreakdown(funded=Decimal("600"), paid=Decimal("400"))
        after = WeeklyBreakdown(funded=Decimal("500"), paid=Decimal("400"))

        summary = summarize(result=_result(before, after))

        assert summary.headline_pct == Decimal("-10")
        assert summary.is_positive is False

    def test_headline_zero_without_baseline(self):
        after = WeeklyBreakdown(funded=Decimal("100"))
        summary = summarize(result=_result(WeeklyBreakdown(), after))
        assert summary.headline_pct == Decimal("0")


class TestBreakEven:

    def test_shortfall_as_paid_uplift(self):
        before = WeeklyBreakdown(funded=Decimal("600"), paid=Decimal("400"))
        after = WeeklyBreakdown(funded=Decimal("500"), paid=Decimal("400"))

        summary = summarize(result=_result(before, after))

        # 100 / 400 paid
        assert summary.break_even_paid_uplift_pct == Decimal("25")

    def test_gain_needs_no_uplift(self):
        before = WeeklyBreakdown(funded=Decimal("600"), paid=Decimal("400"))
        after = WeeklyBreakdown(funded=Decimal("700"), paid=Decimal("400"))

        assert summarize(result=_result(before, after)).break_even_paid_uplift_pct == Decimal("0")

    def test_no_paid_baseline(self):
        before = WeeklyBreakdown(funded=Decimal("600"))
        after = WeeklyBreakdown(funded=Decimal("500"))

        assert summarize(result=_result(before, after)).break_even_paid_uplift_pct == Decimal("0")


class TestBandRows:

    def test_row_figures(self):
        before = WeeklyBreakdown(
            funded=Decimal("300"), paid=Decimal("100"), hours=HoursBreakdown(funded=Decimal("40")),
        )
        after = WeeklyBreakdown(funded=Decimal("250"), paid=Decimal("250"))

        row = summarize(result=_result(before, after)).bands[0]

        assert row.band is AgeBand.U2
        assert row.label == "0-2 years"
        assert row.weekly_2425 == Decimal("400")
        assert row.weekly_2526 == Decimal("500")
        assert row.change == Decimal("100")
        assert row.pct_change == Decimal("25")
        assert row.funded_share_2425 == Decimal("75")
        assert row.paid_share_2425 == Decimal("25")
        assert row.funded_share_2526 == Decimal("50")
        assert row.paid_share_2526 == Decimal("50")

    def test_empty_band_shares_are_zero(self):
        row = summarize(result=_result(WeeklyBreakdown(), WeeklyBreakdown())).bands[0]

        assert row.funded_share_2425 == Decimal("0")
        assert row.paid_share_2526 == Decimal("0")
        assert row.pct_change == Decimal("0")

    def test_sub_unit_total_uses_denominator_of_one(self):
        before = WeeklyBreakdown(funded=Decimal("0.5"))

        row = summarize(result=_result(before, before)).bands[0]

        assert row.funded_share_2425 == Decimal("50")

    def test_rows_follow_projection_order(self):
        result = project(inputs=CalculatorInputs(age_bands=frozenset(AgeBand)))
        rows = summarize(result=result).bands
        assert [r.band for r in rows] == [AgeBand.U2, AgeBand.TWO_TO_THREE, AgeBand.THREE_TO_FOUR]
