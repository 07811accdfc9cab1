"""
claims_services.serialization -- JSON payloads for budget-vs-actuals results.

Dates are ISO strings and Decimals are strings, so no precision is lost
between the engine and whatever renders the report.  Field names are
camelCase to match the report front end.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from claims_engines.aggregation import VarianceAggregate
from claims_engines.budget_vs_actuals import YTDSummary
from claims_engines.variance import MonthlyCalculation

_FIELD_NAMES = {
    "month": "month",
    "ee_count": "eeCount",
    "member_count": "memberCount",
    "total_claims": "totalClaims",
    "fixed_costs": "fixedCosts",
    "fixed_costs_breakdown": "fixedCostsBreakdown",
    "stop_loss_reimb": "stopLossReimb",
    "rx_rebates": "rxRebates",
    "actual_total_expenses": "actualTotalExpenses",
    "expected_claims_budget": "expectedClaimsBudget",
    "budgeted_fixed_costs": "budgetedFixedCosts",
    "budget_total_expenses": "budgetTotalExpenses",
    "variance_dollars": "varianceDollars",
    "variance_percent": "variancePercent",
    "pepm": "pepm",
    "pepem": "pepem",
}


def _value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _record(record: MonthlyCalculation | VarianceAggregate) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for name, key in _FIELD_NAMES.items():
        if not hasattr(record, name):
            continue
        if name == "fixed_costs_breakdown":
            payload[key] = [
                {"feeName": line.fee_name, "amount": _value(line.amount)}
                for line in record.fixed_costs_breakdown
            ]
        else:
            payload[key] = _value(getattr(record, name))
    return payload


def summary_to_dict(summary: YTDSummary) -> dict[str, Any]:
    """``{"months": [...], "ytd": {...}, "lastThreeMonths": {...}}``"""
    return {
        "months": [_record(m) for m in summary.months],
        "ytd": _record(summary.ytd),
        "lastThreeMonths": _record(summary.last_three_months),
    }


def summary_to_json(summary: YTDSummary, indent: int | None = None) -> str:
    return json.dumps(summary_to_dict(summary), indent=indent)
