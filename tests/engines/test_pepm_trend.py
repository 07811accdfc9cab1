"""
Tests for the PEPM current-vs-prior trend.

Covers:
- Even and odd month counts
- Chronological sorting
- Zero prior PEPM and empty input
- Multiple metrics
"""

from datetime import date
from decimal import Decimal

from claims_engines.pepm_trend import (
    CostMonth,
    PepmMonth,
    PepmPeriod,
    calculate_multiple_pepm,
    calculate_pepm,
    format_pepm,
)


def _m(month: int, subscribers: int, metric: str, year: int = 2025) -> PepmMonth:
    return PepmMonth(month=date(year, month, 1), subscribers=subscribers, metric=Decimal(metric))


class TestCalculatePepm:
    """Split-period PEPM comparison."""

    def test_even_split(self):
        result = calculate_pepm([_m(1, 100, "50000"), _m(2, 100, "50000"), _m(3, 100, "55000"), _m(4, 100, "55000")])

        assert result.prior.total_metric == Decimal("100000")
        assert result.prior.member_months == 200
        assert result.prior.avg_subscribers == Decimal("100")
        assert result.prior.pepm == Decimal("1000")
        assert result.current.pepm == Decimal("1100")
        assert result.change.absolute == Decimal("100")
        assert result.change.percent == Decimal("0.1")

    def test_odd_month_goes_to_current(self):
        result = calculate_pepm([_m(1, 10, "1000"), _m(2, 10, "1000"), _m(3, 10, "1000")])

        assert result.prior.member_months == 10
        assert result.current.member_months == 20

    def test_sorted_chronologically(self):
        ordered = calculate_pepm([_m(1, 100, "1000"), _m(2, 100, "2000")])
        shuffled = calculate_pepm([_m(2, 100, "2000"), _m(1, 100, "1000")])

        assert shuffled == ordered
        assert ordered.prior.total_metric == Decimal("1000")

    def test_single_month_has_empty_prior(self):
        result = calculate_pepm([_m(1, 100, "1000")])

        assert result.prior == PepmPeriod()
        assert result.current.pepm == Decimal("10")
        assert result.change.percent == Decimal("0")

    def test_empty(self):
        result = calculate_pepm([])

        assert result.current == PepmPeriod()
        assert result.prior == PepmPeriod()
        assert result.change.absolute == Decimal("0")

    def test_zero_subscribers(self):
        result = calculate_pepm([_m(1, 0, "1000"), _m(2, 0, "1000")])
        assert result.current.pepm == Decimal("0")


class TestCalculateMultiplePepm:

    def test_each_metric(self):
        months = [
            CostMonth(date(2025, 1, 1), 100, Decimal("60000"), Decimal("20000"), Decimal("90000")),
            CostMonth(date(2025, 2, 1), 100, Decimal("66000"), Decimal("22000"), Decimal("99000")),
        ]
        result = calculate_multiple_pepm(months)

        assert result.medical.prior.pepm == Decimal("600")
        assert result.rx.current.pepm == Decimal("220")
        assert result.total_cost.change.absolute == Decimal("90")


class TestFormatPepm:

    def test_format(self):
        assert format_pepm(Decimal("1234.5")) == "$1,234.50"
