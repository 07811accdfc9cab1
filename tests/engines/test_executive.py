"""
Tests for executive summary metrics.

Covers:
- YTD plan cost, surplus and percent of budget
- Fuel gauge thresholds
- Medical/pharmacy split
- Plan mix and claimant buckets
- Observation text
"""

from datetime import date
from decimal import Decimal

import pytest

from claims_engines.executive import (
    FuelGaugeStatus,
    PlanCost,
    calculate_claimant_buckets,
    calculate_executive_ytd,
    calculate_plan_mix,
    format_currency,
    format_percent,
    fuel_gauge_status,
    generate_executive_observation,
)
from claims_engines.monthly_columns import MonthlyPlanData, calculate_monthly_columns


def _month(month: int, medical: str, rx: str, premium: str):
    return calculate_monthly_columns(
        MonthlyPlanData(
            month=date(2025, month, 1),
            plan_id="ALL",
            plan_name="All Plans",
            total_subscribers=100,
            medical_paid=Decimal(medical),
            rx_paid=Decimal(rx),
            spec_stop_loss_reimb=Decimal("0"),
            est_rx_rebates=Decimal("0"),
            admin_fees=Decimal("5000"),
            stop_loss_fees=Decimal("5000"),
            budgeted_premium=Decimal(premium),
        )
    )


class TestCalculateExecutiveYtd:
    """Headline figures across months."""

    def test_under_budget(self):
        months = [_month(1, "60000", "20000", "100000"), _month(2, "60000", "20000", "100000")]
        result = calculate_executive_ytd(months)

        assert result.budgeted_premium == Decimal("200000")
        assert result.total_plan_cost == Decimal("180000")
        assert result.surplus_deficit == Decimal("20000")
        assert result.percent_of_budget == Decimal("0.9")
        assert result.fuel_gauge_status == FuelGaugeStatus.GREEN
        assert result.medical_percent == Decimal("0.75")
        assert result.rx_percent == Decimal("0.25")

    def test_ibnr_added_to_cost(self):
        months = [_month(1, "60000", "20000", "100000")]
        result = calculate_executive_ytd(months, ibnr=Decimal("10000"))

        assert result.total_plan_cost == Decimal("100000")
        assert result.percent_of_budget == Decimal("1")
        assert result.fuel_gauge_status == FuelGaugeStatus.YELLOW

    def test_no_months(self):
        result = calculate_executive_ytd([])

        assert result.percent_of_budget == Decimal("0")
        assert result.medical_percent == Decimal("0")
        assert result.fuel_gauge_status == FuelGaugeStatus.GREEN


class TestFuelGauge:

    @pytest.mark.parametrize(
        "fraction,status",
        [
            ("0.9499", FuelGaugeStatus.GREEN),
            ("0.95", FuelGaugeStatus.YELLOW),
            ("1.05", FuelGaugeStatus.YELLOW),
            ("1.0501", FuelGaugeStatus.RED),
        ],
    )
    def test_thresholds(self, fraction, status):
        assert fuel_gauge_status(Decimal(fraction)) == status


class TestPlanMixAndBuckets:

    def test_plan_mix(self):
        mix = calculate_plan_mix(
            [PlanCost("PPO", Decimal("300000")), PlanCost("HDHP", Decimal("100000"))]
        )
        assert [(m.plan_name, m.percent) for m in mix] == [
            ("PPO", Decimal("0.75")),
            ("HDHP", Decimal("0.25")),
        ]

    def test_plan_mix_zero_total(self):
        mix = calculate_plan_mix([PlanCost("PPO", Decimal("0"))])
        assert mix[0].percent == Decimal("0")

    def test_claimant_buckets(self):
        buckets = calculate_claimant_buckets(
            [Decimal("250000"), Decimal("200000"), Decimal("150000"), Decimal("100000"), Decimal("99999")]
        )
        assert (buckets.over_200k.count, buckets.over_200k.total) == (2, Decimal("450000"))
        assert (buckets.range_100k_to_200k.count, buckets.range_100k_to_200k.total) == (
            2,
            Decimal("250000"),
        )
        assert (buckets.under_100k.count, buckets.under_100k.total) == (1, Decimal("99999"))


class TestExecutiveObservation:

    def test_under_budget_surplus(self):
        result = calculate_executive_ytd(
            [_month(1, "60000", "20000", "100000"), _month(2, "60000", "20000", "100000")]
        )
        assert generate_executive_observation(result) == (
            "Plan is under budget for the rolling 12 and current plan year to date. "
            "Medical claims represent 75.0% of total paid, pharmacy 25.0%. "
            "Year-to-date surplus: $20,000."
        )

    def test_over_budget_deficit(self):
        result = calculate_executive_ytd([_month(1, "80000", "20000", "100000")])
        assert generate_executive_observation(result) == (
            "Plan is over budget at 110.0% of budgeted premium. "
            "Medical claims represent 80.0% of total paid, pharmacy 20.0%. "
            "Year-to-date deficit: $10,000."
        )

    def test_on_budget_has_no_budget_sentence(self):
        result = calculate_executive_ytd([_month(1, "70000", "20000", "100000")])
        text = generate_executive_observation(result)

        assert not text.startswith("Plan is")
        assert "surplus" not in text and "deficit" not in text


class TestFormatting:

    def test_currency(self):
        assert format_currency(Decimal("1234567.4")) == "$1,234,567"
        assert format_currency(Decimal("-50")) == "-$50"
        assert format_currency(Decimal("12.345"), decimals=2) == "$12.34"

    def test_percent(self):
        assert format_percent(Decimal("0.9434")) == "94.3%"
