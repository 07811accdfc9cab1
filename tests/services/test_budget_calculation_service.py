"""
Tests for the budget calculation service and row coercion.

Covers:
- Coercion of raw rows (strings, camelCase keys, enrollment aliases)
- Rejection of negative amounts, non-positive counts, bad dates
- Ordering of actuals before calculation
- Budget policy resolution
- NoActualsFoundError for an empty plan year
- plan_year_id carried on every log record of a calculation
- JSON serialisation of the summary
"""

import json
from datetime import date
from decimal import Decimal

import pytest

from claims_kernel.domain.values import (
    AppliesTo,
    BudgetConfig,
    RoundingMode,
    UnitType,
)
from claims_kernel.exceptions import (
    ConfigFileError,
    InvalidAmountError,
    InvalidBudgetConfigError,
    InvalidCountError,
    InvalidFeeWindowError,
    InvalidServiceMonthError,
    NoActualsFoundError,
)
from claims_kernel.logging_config import LogContext
from claims_services import (
    BudgetCalculationService,
    coerce_actuals_row,
    coerce_budget_config_row,
    coerce_config_row,
    coerce_fee_window_row,
    summary_to_dict,
    summary_to_json,
)


def _row(**overrides):
    row = {
        "service_month": "2025-01-15",
        "domestic_facility_ip_op": "50000",
        "non_domestic_ip_op": "10000.00",
        "non_hospital_medical": 30000,
        "rx_claims": "$20,000",
        "ee_count": "100",
        "member_count": 250,
    }
    row.update(overrides)
    return row


ADMIN_FEE_ROW = {
    "fee_name": "Admin Fee",
    "unit_type": "ANNUAL",
    "rate": "120000",
    "applies_to": "FIXED",
    "effective_start": "2025-01-01",
    "effective_end": "2025-12-31",
}


class TestCoerceActualsRow:
    """Raw actuals rows to MonthlyActuals."""

    def test_string_amounts_and_month_normalised(self):
        actual = coerce_actuals_row(_row())

        assert actual.service_month == date(2025, 1, 1)
        assert actual.rx_claims == Decimal("20000")
        assert actual.total_claims == Decimal("110000")
        assert (actual.ee_count, actual.member_count) == (100, 250)

    def test_camel_case_keys(self):
        actual = coerce_actuals_row({
            "serviceMonth": "2025-02",
            "domesticFacilityIpOp": "1",
            "nonDomesticIpOp": "2",
            "nonHospitalMedical": "3",
            "rxClaims": "4",
            "eeCount": 5,
            "memberCount": 6,
        })

        assert actual.service_month == date(2025, 2, 1)
        assert actual.total_claims == Decimal("10")
        assert actual.member_count == 6

    def test_active_cobra_alias(self):
        row = _row()
        del row["ee_count"]
        row["ee_count_active_cobra"] = "98"

        assert coerce_actuals_row(row).ee_count == 98

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            coerce_actuals_row(_row(rx_claims="-1"))
        assert exc_info.value.field == "rx_claims"

    def test_missing_amount_rejected(self):
        row = _row()
        del row["non_hospital_medical"]

        with pytest.raises(InvalidAmountError):
            coerce_actuals_row(row)

    @pytest.mark.parametrize("count", [0, -3, "2.5", "abc", None, True])
    def test_invalid_member_count(self, count):
        with pytest.raises(InvalidCountError):
            coerce_actuals_row(_row(member_count=count))

    def test_integral_count_string_accepted(self):
        assert coerce_actuals_row(_row(ee_count="1,200.0")).ee_count == 1200

    def test_bad_service_month(self):
        with pytest.raises(InvalidServiceMonthError):
            coerce_actuals_row(_row(service_month="not a date"))


class TestCoerceOtherRows:

    def test_config_row_defaults_to_zero(self):
        config = coerce_config_row({"serviceMonth": "2025-03-01", "expectedClaims": "107000"})

        assert config.service_month == date(2025, 3, 1)
        assert config.expected_claims == Decimal("107000")
        assert config.stop_loss_reimb == Decimal("0")
        assert config.rx_rebates == Decimal("0")

    def test_config_row_blank_amount(self):
        config = coerce_config_row({"service_month": "2025-03-01", "rx_rebates": ""})
        assert config.rx_rebates == Decimal("0")

    def test_fee_window_row(self):
        fee = coerce_fee_window_row(ADMIN_FEE_ROW)

        assert fee.unit_type == UnitType.ANNUAL
        assert fee.applies_to == AppliesTo.FIXED
        assert fee.effective_end == date(2025, 12, 31)

    def test_fee_window_negative_rate(self):
        with pytest.raises(InvalidAmountError):
            coerce_fee_window_row({**ADMIN_FEE_ROW, "rate": "-1"})

    def test_fee_window_inverted(self):
        with pytest.raises(InvalidFeeWindowError):
            coerce_fee_window_row({**ADMIN_FEE_ROW, "effective_end": "2024-12-31"})

    def test_fee_window_blank_name(self):
        with pytest.raises(ConfigFileError):
            coerce_fee_window_row({**ADMIN_FEE_ROW, "fee_name": ""})

    def test_config_row_negative_overlay(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            coerce_config_row({"service_month": "2025-01", "stop_loss_reimb": "-1"})
        assert exc_info.value.field == "stop_loss_reimb"

    def test_budget_config_row(self):
        config = coerce_budget_config_row({
            "id": 7,
            "planYearId": "PY2025",
            "roundingMode": "BANKER",
            "currencyPrecision": 0,
        })
        assert config.rounding_mode == RoundingMode.BANKER
        assert config.currency_precision == 0

    def test_budget_config_row_none(self):
        assert coerce_budget_config_row(None) == BudgetConfig()

    def test_budget_config_row_invalid(self):
        with pytest.raises(InvalidBudgetConfigError):
            coerce_budget_config_row({"rounding_mode": "STOCHASTIC"})


class TestBudgetCalculationService:
    """End-to-end calculation through the service."""

    def setup_method(self):
        self.service = BudgetCalculationService()

    def test_q1_from_domain_records(self, q1_actuals, q1_configs, admin_fee):
        summary = self.service.calculate("PY2025", q1_actuals, q1_configs, [admin_fee])

        assert len(summary.months) == 3
        assert summary.ytd.total_claims == Decimal("339000")
        assert summary.ytd.fixed_costs == Decimal("30000")
        assert summary.ytd.actual_total_expenses == Decimal("369000")
        assert summary.ytd.budget_total_expenses == Decimal("352000")
        assert summary.ytd.variance_dollars == Decimal("17000")
        assert summary.ytd.variance_percent == Decimal("4.83")

    def test_rows_match_domain_records(self, q1_actuals, q1_configs, admin_fee):
        rows = [
            {
                "service_month": a.service_month.isoformat(),
                "domestic_facility_ip_op": str(a.domestic_facility_ip_op),
                "non_domestic_ip_op": str(a.non_domestic_ip_op),
                "non_hospital_medical": str(a.non_hospital_medical),
                "rx_claims": str(a.rx_claims),
                "ee_count": a.ee_count,
                "member_count": a.member_count,
            }
            for a in q1_actuals
        ]
        config_rows = [
            {"service_month": c.service_month.isoformat(), "expected_claims": str(c.expected_claims)}
            for c in q1_configs
        ]

        from_rows = self.service.calculate("PY2025", rows, config_rows, [ADMIN_FEE_ROW])
        from_records = self.service.calculate("PY2025", q1_actuals, q1_configs, [admin_fee])

        assert from_rows == from_records

    def test_actuals_sorted_before_calculation(self, q1_actuals, q1_configs):
        summary = self.service.calculate("PY2025", list(reversed(q1_actuals)), q1_configs)

        assert [m.month for m in summary.months] == [
            date(2025, 1, 1),
            date(2025, 2, 1),
            date(2025, 3, 1),
        ]

    def test_explicit_budget_config_row(self, make_actuals):
        actual = make_actuals(date(2025, 1, 1), "1000.25", "0", "0", "0", 1, 2)

        half_up = self.service.calculate("PY", [actual])
        banker = self.service.calculate("PY", [actual], budget_config={"rounding_mode": "BANKER"})

        assert half_up.months[0].pepm == Decimal("500.13")
        assert banker.months[0].pepm == Decimal("500.12")

    def test_instance_default_budget_config(self, make_actuals, banker_config):
        service = BudgetCalculationService(default_budget_config=banker_config)
        actual = make_actuals(date(2025, 1, 1), "1000.25", "0", "0", "0", 1, 2)

        assert service.calculate("PY", [actual]).months[0].pepm == Decimal("500.12")

    def test_no_actuals(self, captured_logs):
        with pytest.raises(NoActualsFoundError) as exc_info:
            self.service.calculate("PY2030", [])

        assert exc_info.value.plan_year_id == "PY2030"
        assert exc_info.value.code == "NO_ACTUALS_FOUND"
        warning = next(r for r in captured_logs() if r["message"] == "budget_calculation_no_actuals")
        assert warning["plan_year_id"] == "PY2030"

    def test_plan_year_on_every_log_record(self, q1_actuals, q1_configs, captured_logs):
        self.service.calculate("PY2025", q1_actuals, q1_configs)

        records = captured_logs()
        messages = {r["message"] for r in records}
        assert {"budget_calculation_started", "budget_calculation_completed", "CLAIMS_ENGINE_TRACE"} <= messages
        assert all(r.get("plan_year_id") == "PY2025" for r in records)
        assert LogContext.get_all() == {}

    def test_invalid_row_propagates(self):
        with pytest.raises(InvalidCountError):
            self.service.calculate("PY", [_row(ee_count=0)])


class TestSerialization:

    def test_summary_to_dict(self, q1_actuals, q1_configs, admin_fee):
        summary = BudgetCalculationService().calculate(
            "PY2025", q1_actuals, q1_configs, [admin_fee]
        )
        payload = summary_to_dict(summary)

        assert set(payload) == {"months", "ytd", "lastThreeMonths"}
        january = payload["months"][0]
        assert january["month"] == "2025-01-01"
        assert january["variancePercent"] == "4.35"
        assert january["fixedCostsBreakdown"] == [{"feeName": "Admin Fee", "amount": "10000.00"}]
        assert payload["ytd"]["varianceDollars"] == "17000.00"
        assert payload["ytd"]["memberCount"] == 757
        assert "month" not in payload["ytd"]

    def test_summary_to_json_round_trips_as_json(self, q1_actuals, q1_configs):
        summary = BudgetCalculationService().calculate("PY2025", q1_actuals, q1_configs)

        assert json.loads(summary_to_json(summary)) == summary_to_dict(summary)
