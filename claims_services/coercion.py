"""
claims_services.coercion -- Raw rows to domain records.

Responsibility:
    Turn the loosely typed rows a caller holds (parsed upload rows, JSON
    bodies, database records) into the frozen domain records the engines
    accept, enforcing the upload rules on the way.

Architecture position:
    Services -- the boundary where untyped data becomes typed.  Engines
    never see a string amount or an ISO date string.

Rules:
    - Claims amounts and monthly overlay amounts are non-negative decimals.
    - ``ee_count`` and ``member_count`` are positive integers.
    - Fee rates are non-negative; ``effective_end >= effective_start``.
    - Service months are normalised to the first of the month.

Failure modes:
    - InvalidAmountError, InvalidCountError, InvalidServiceMonthError,
      InvalidFeeWindowError, InvalidBudgetConfigError.
    - ConfigFileError when a fee window row lacks a required key or
      has a blank fee name.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from claims_config import (
    parse_budget_config,
    parse_date,
    parse_fee_window,
    parse_non_negative_decimal,
)
from claims_kernel.domain.values import (
    ZERO,
    BudgetConfig,
    FeeWindow,
    MonthlyActuals,
    MonthlyConfig,
    month_start,
)
from claims_kernel.exceptions import InvalidCountError

CLAIMS_FIELDS = (
    "domestic_facility_ip_op",
    "non_domestic_ip_op",
    "non_hospital_medical",
    "rx_claims",
)

# Upload files label the employee column with the enrollment basis.
EE_COUNT_ALIASES = ("ee_count", "ee_count_active_cobra")

_CAMEL_ALIASES = {
    "serviceMonth": "service_month",
    "domesticFacilityIpOp": "domestic_facility_ip_op",
    "nonDomesticIpOp": "non_domestic_ip_op",
    "nonHospitalMedical": "non_hospital_medical",
    "rxClaims": "rx_claims",
    "eeCount": "ee_count",
    "memberCount": "member_count",
    "expectedClaims": "expected_claims",
    "stopLossReimb": "stop_loss_reimb",
    "rxRebates": "rx_rebates",
    "feeName": "fee_name",
    "unitType": "unit_type",
    "appliesTo": "applies_to",
    "effectiveStart": "effective_start",
    "effectiveEnd": "effective_end",
    "claimsModelType": "claims_model_type",
    "pctClaimsBase": "pct_claims_base",
    "roundingMode": "rounding_mode",
    "currencyPrecision": "currency_precision",
    "defaultHorizonMonths": "default_horizon_months",
}


def _normalise_keys(row: Mapping[str, Any]) -> dict[str, Any]:
    return {_CAMEL_ALIASES.get(k, k): v for k, v in row.items()}


def positive_count(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidCountError(field, value)
    try:
        number = Decimal(str(value).strip().replace(",", ""))
    except ArithmeticError:
        raise InvalidCountError(field, value) from None
    if not number.is_finite() or number != number.to_integral_value() or number <= 0:
        raise InvalidCountError(field, value)
    return int(number)


def coerce_actuals_row(row: Mapping[str, Any]) -> MonthlyActuals:
    """One month of actuals from a raw row."""
    data = _normalise_keys(row)
    ee_value = next((data[k] for k in EE_COUNT_ALIASES if data.get(k) is not None), None)

    return MonthlyActuals(
        service_month=month_start(parse_date("service_month", data.get("service_month"))),
        **{field: parse_non_negative_decimal(field, data.get(field)) for field in CLAIMS_FIELDS},
        ee_count=positive_count("ee_count", ee_value),
        member_count=positive_count("member_count", data.get("member_count")),
    )


def coerce_config_row(row: Mapping[str, Any]) -> MonthlyConfig:
    """A monthly budget overlay; absent amounts default to zero."""
    data = _normalise_keys(row)

    def amount(field: str) -> Decimal:
        value = data.get(field)
        return ZERO if value is None or value == "" else parse_non_negative_decimal(field, value)

    return MonthlyConfig(
        service_month=month_start(parse_date("service_month", data.get("service_month"))),
        expected_claims=amount("expected_claims"),
        stop_loss_reimb=amount("stop_loss_reimb"),
        rx_rebates=amount("rx_rebates"),
    )


def coerce_fee_window_row(row: Mapping[str, Any]) -> FeeWindow:
    """A fee schedule window; the rate must be non-negative and the name non-blank."""
    return parse_fee_window(_normalise_keys(row), source="fee_window_row")


def coerce_budget_config_row(row: Mapping[str, Any] | None) -> BudgetConfig:
    """A budget policy; absent fields take the engine defaults."""
    if row is None:
        return BudgetConfig()
    data = {
        k: v
        for k, v in _normalise_keys(row).items()
        if k not in ("id", "plan_year_id", "planYearId")
    }
    return parse_budget_config(data)
