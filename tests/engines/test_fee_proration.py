"""
Tests for fee proration.

Covers:
- Day-based proration for ANNUAL, MONTHLY and FLAT windows
- Windows that start or end mid-month, leap years, no overlap
- PEPM/PEPEM enrollment mapping
- PERCENT_OF_CLAIMS on actual and expected bases
- Unknown unit types and non-positive fees
- Multi-fee breakdowns
"""

from datetime import date
from decimal import Decimal

import pytest

from claims_engines.fee_proration import (
    UNKNOWN_FEE_NAME,
    MonthContext,
    calculate_monthly_fees,
    days_in_month,
    fee_for_month,
    prorate_for_month,
    safe_divide,
)
from claims_kernel.domain.values import AppliesTo, FeeWindow, PctClaimsBase, UnitType


def _fee(
    name: str = "Fee",
    unit: UnitType | str = UnitType.MONTHLY,
    rate: str = "1000",
    start: date = date(2025, 1, 1),
    end: date = date(2025, 12, 31),
) -> FeeWindow:
    return FeeWindow(
        fee_name=name,
        unit_type=unit,
        rate=Decimal(rate),
        applies_to=AppliesTo.FIXED,
        effective_start=start,
        effective_end=end,
    )


def _ctx(month: date = date(2025, 1, 1), **overrides) -> MonthContext:
    values = dict(
        month=month,
        members=250,
        employees=100,
        total_claims=Decimal("110000"),
        expected_claims=Decimal("105000"),
    )
    values.update(overrides)
    return MonthContext(**values)


class TestProrateForMonth:
    """Day-based proration of period fees."""

    def test_annual_full_month_is_one_twelfth(self):
        amount = prorate_for_month(
            Decimal("120000"), UnitType.ANNUAL, date(2025, 1, 1), date(2025, 12, 31), date(2025, 1, 1)
        )
        assert amount == Decimal("10000")

    def test_monthly_full_month_is_full_rate(self):
        amount = prorate_for_month(
            Decimal("5000"), UnitType.MONTHLY, date(2025, 1, 1), date(2025, 12, 31), date(2025, 3, 1)
        )
        assert amount == Decimal("5000")

    def test_monthly_starting_mid_february(self):
        """Feb 15-28 is 14 of 28 days."""
        amount = prorate_for_month(
            Decimal("5000"), UnitType.MONTHLY, date(2025, 2, 15), date(2025, 12, 31), date(2025, 2, 1)
        )
        assert amount == Decimal("2500")

    def test_flat_prorates_like_monthly(self):
        monthly = prorate_for_month(
            Decimal("900"), UnitType.MONTHLY, date(2025, 4, 11), date(2025, 12, 31), date(2025, 4, 1)
        )
        flat = prorate_for_month(
            Decimal("900"), UnitType.FLAT, date(2025, 4, 11), date(2025, 12, 31), date(2025, 4, 1)
        )
        assert flat == monthly == Decimal("600")

    def test_window_ending_mid_month(self):
        """Window ends June 10: 10 of 30 days."""
        amount = prorate_for_month(
            Decimal("3000"), UnitType.MONTHLY, date(2025, 1, 1), date(2025, 6, 10), date(2025, 6, 1)
        )
        assert amount == Decimal("1000")

    def test_window_inside_month(self):
        """Jan 10-20 is 11 inclusive days of 31."""
        amount = prorate_for_month(
            Decimal("3100"), UnitType.MONTHLY, date(2025, 1, 10), date(2025, 1, 20), date(2025, 1, 1)
        )
        assert amount == Decimal("1100")

    def test_single_day_window(self):
        amount = prorate_for_month(
            Decimal("3100"), UnitType.MONTHLY, date(2025, 1, 5), date(2025, 1, 5), date(2025, 1, 1)
        )
        assert amount == Decimal("100")

    def test_window_before_month_is_zero(self):
        amount = prorate_for_month(
            Decimal("5000"), UnitType.MONTHLY, date(2024, 1, 1), date(2024, 12, 31), date(2025, 1, 1)
        )
        assert amount == Decimal("0")

    def test_window_after_month_is_zero(self):
        amount = prorate_for_month(
            Decimal("5000"), UnitType.ANNUAL, date(2025, 2, 1), date(2025, 12, 31), date(2025, 1, 1)
        )
        assert amount == Decimal("0")

    def test_leap_year_february(self):
        """Feb 2024 has 29 days; half-month from Feb 16 is 14/29."""
        full = prorate_for_month(
            Decimal("120000"), UnitType.ANNUAL, date(2024, 1, 1), date(2024, 12, 31), date(2024, 2, 1)
        )
        partial = prorate_for_month(
            Decimal("2900"), UnitType.MONTHLY, date(2024, 2, 16), date(2024, 12, 31), date(2024, 2, 1)
        )
        assert full == Decimal("10000")
        assert partial == Decimal("1400")

    def test_month_given_mid_month_is_normalised(self):
        amount = prorate_for_month(
            Decimal("5000"), UnitType.MONTHLY, date(2025, 1, 1), date(2025, 12, 31), date(2025, 3, 17)
        )
        assert amount == Decimal("5000")

    def test_usage_units_return_zero(self):
        for unit in (UnitType.PEPM, UnitType.PEPEM, UnitType.PERCENT_OF_CLAIMS):
            assert prorate_for_month(
                Decimal("10"), unit, date(2025, 1, 1), date(2025, 12, 31), date(2025, 1, 1)
            ) == Decimal("0")

    @pytest.mark.parametrize(
        "month,expected",
        [(date(2025, 1, 1), 31), (date(2025, 2, 1), 28), (date(2024, 2, 1), 29), (date(2025, 4, 1), 30)],
    )
    def test_days_in_month(self, month, expected):
        assert days_in_month(month) == expected


class TestFeeForMonth:
    """Unit-type dispatch for a single fee window."""

    def test_pepm_uses_member_count(self):
        assert fee_for_month(_fee(unit=UnitType.PEPM, rate="10"), _ctx()) == Decimal("2500")

    def test_pepem_uses_employee_count(self):
        assert fee_for_month(_fee(unit=UnitType.PEPEM, rate="10"), _ctx()) == Decimal("1000")

    def test_pepm_ignores_effective_window(self):
        """Usage-based fees apply even outside their effective dates."""
        fee = _fee(unit=UnitType.PEPM, rate="10", start=date(2026, 1, 1), end=date(2026, 12, 31))
        assert fee_for_month(fee, _ctx()) == Decimal("2500")

    def test_percent_of_actual_claims(self):
        fee = _fee(unit=UnitType.PERCENT_OF_CLAIMS, rate="0.05")
        assert fee_for_month(fee, _ctx()) == Decimal("5500.00")

    def test_percent_of_expected_claims(self):
        fee = _fee(unit=UnitType.PERCENT_OF_CLAIMS, rate="0.05")
        ctx = _ctx(pct_base=PctClaimsBase.EXPECTED)
        assert fee_for_month(fee, ctx) == Decimal("5250.00")

    def test_unit_type_given_as_string(self):
        assert fee_for_month(_fee(unit="PEPM", rate="2"), _ctx()) == Decimal("500")

    def test_unknown_unit_type_contributes_nothing(self):
        assert fee_for_month(_fee(unit="WEEKLY", rate="100"), _ctx()) == Decimal("0")


class TestCalculateMonthlyFees:
    """Summing several windows into a month's fixed costs."""

    def test_overlapping_windows_are_additive(self):
        fees = [
            _fee("Admin Fee", UnitType.ANNUAL, "120000"),
            _fee("Stop Loss Fee", UnitType.MONTHLY, "5000", start=date(2025, 2, 15)),
        ]
        result = calculate_monthly_fees(fees, _ctx(month=date(2025, 2, 1)))

        assert result.total == Decimal("12500")
        assert [(line.fee_name, line.amount) for line in result.breakdown] == [
            ("Admin Fee", Decimal("10000")),
            ("Stop Loss Fee", Decimal("2500")),
        ]

    def test_zero_amount_fees_are_omitted(self):
        fees = [
            _fee("Admin Fee", UnitType.ANNUAL, "120000"),
            _fee("Future Fee", UnitType.MONTHLY, "5000", start=date(2025, 6, 1)),
            _fee("Free Fee", UnitType.MONTHLY, "0"),
        ]
        result = calculate_monthly_fees(fees, _ctx())

        assert result.total == Decimal("10000")
        assert [line.fee_name for line in result.breakdown] == ["Admin Fee"]

    def test_negative_amount_fees_are_omitted(self):
        result = calculate_monthly_fees([_fee(unit=UnitType.PEPM, rate="-1")], _ctx())
        assert result.total == Decimal("0")
        assert result.breakdown == ()

    def test_blank_name_gets_placeholder(self):
        result = calculate_monthly_fees([_fee(name="")], _ctx())
        assert result.breakdown[0].fee_name == UNKNOWN_FEE_NAME

    def test_no_fees(self):
        result = calculate_monthly_fees([], _ctx())
        assert result.total == Decimal("0")
        assert result.breakdown == ()


class TestSafeDivide:

    def test_zero_denominator(self):
        assert safe_divide(Decimal("5"), 0) == Decimal("0")

    def test_regular_division(self):
        assert safe_divide(Decimal("5"), Decimal("2")) == Decimal("2.5")
