"""
claims_engines.fee_proration -- Monthly fee contributions with mid-period proration.

Responsibility:
    Compute the dollar contribution of a fee schedule window to one
    calendar month.  Period-based fees (ANNUAL, MONTHLY, FLAT) are prorated
    by the number of days the window overlaps the month; usage-based fees
    (PEPM, PEPEM, PERCENT_OF_CLAIMS) are multiplied directly against the
    month's enrollment or claims.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import claims_kernel.domain and sibling engine modules.
    Consumed by the monthly variance calculator.

Invariants enforced:
    - Determinism: no clock access; the month comes from the caller.
    - Decimal-only arithmetic.
    - Overlapping windows are additive, never exclusive.
    - PEPM multiplies by MEMBER count and PEPEM by EMPLOYEE count.  Other
      parts of the reporting system depend on this exact mapping.

Failure modes:
    - None for well-typed input.  A window that misses the month, an
      unknown unit type, and a zero denominator all yield Decimal("0").

Usage:
    from claims_engines.fee_proration import prorate_for_month, MonthContext
    from claims_kernel.domain.values import UnitType

    prorate_for_month(
        rate=Decimal("5000"),
        unit=UnitType.MONTHLY,
        window_start=date(2025, 2, 15),
        window_end=date(2025, 12, 31),
        month=date(2025, 2, 1),
    )  # Decimal("2500")
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from claims_kernel.domain.values import (
    PRORATED_UNITS,
    ZERO,
    FeeWindow,
    PctClaimsBase,
    UnitType,
    month_start,
)
from claims_kernel.logging_config import get_logger

logger = get_logger("engines.fee_proration")

MONTHS_PER_YEAR = 12
UNKNOWN_FEE_NAME = "Unknown Fee"


def safe_divide(numerator: Decimal | int, denominator: Decimal | int) -> Decimal:
    """Divide, returning Decimal("0") when the denominator is zero."""
    if denominator == 0:
        return ZERO
    return Decimal(numerator) / Decimal(denominator)


def days_in_month(month: date) -> int:
    return calendar.monthrange(month.year, month.month)[1]


@dataclass(frozen=True)
class MonthContext:
    """Enrollment and claims figures a usage-based fee is applied against."""

    month: date  # first day of month
    members: int
    employees: int
    total_claims: Decimal
    expected_claims: Decimal
    pct_base: PctClaimsBase = PctClaimsBase.ACTUAL


@dataclass(frozen=True)
class FeeLine:
    """One fee's contribution to a month."""

    fee_name: str
    amount: Decimal


@dataclass(frozen=True)
class FeeTotals:
    """Total of all contributing fees plus the itemised breakdown."""

    total: Decimal
    breakdown: tuple[FeeLine, ...] = ()


def prorate_for_month(
    rate: Decimal,
    unit: UnitType | str,
    window_start: date,
    window_end: date,
    month: date,
) -> Decimal:
    """
    Prorate a period-based fee over its overlap with a calendar month.

    Formula:
        factor  = overlap days (inclusive) / days in month
        ANNUAL  = rate / 12 * factor
        MONTHLY = FLAT = rate * factor

    A window covering the whole month gives factor 1 (the full rate).
    Usage-based units return Decimal("0") here; see ``fee_for_month``.
    """
    first = month_start(month)
    month_days = days_in_month(first)
    last = first.replace(day=month_days)

    overlap_start = max(first, window_start)
    overlap_end = min(last, window_end)
    if overlap_end < overlap_start:
        return ZERO

    overlap_days = (overlap_end - overlap_start).days + 1

    if unit == UnitType.ANNUAL:
        # rate / 12 * overlap / days, divided once to limit Decimal drift
        return Decimal(rate) * overlap_days / (MONTHS_PER_YEAR * month_days)
    if unit in (UnitType.MONTHLY, UnitType.FLAT):
        return Decimal(rate) * overlap_days / month_days
    return ZERO


def fee_for_month(fee: FeeWindow, ctx: MonthContext) -> Decimal:
    """
    Calculate one fee window's amount for the month in ``ctx``.

    PEPM, PEPEM and PERCENT_OF_CLAIMS apply directly and do not consult the
    effective window.  Unknown unit types contribute nothing.
    """
    try:
        unit = UnitType(fee.unit_type)
    except ValueError:
        logger.debug("fee_unit_type_unknown", extra={
            "fee_name": fee.fee_name,
            "unit_type": str(fee.unit_type),
        })
        return ZERO

    rate = Decimal(fee.rate)

    if unit == UnitType.PEPM:
        return rate * ctx.members
    if unit == UnitType.PEPEM:
        return rate * ctx.employees
    if unit == UnitType.PERCENT_OF_CLAIMS:
        base = ctx.expected_claims if ctx.pct_base == PctClaimsBase.EXPECTED else ctx.total_claims
        return rate * base
    if unit in PRORATED_UNITS:
        return prorate_for_month(
            rate,
            unit,
            fee.effective_start,
            fee.effective_end,
            ctx.month,
        )
    return ZERO


def calculate_monthly_fees(
    fee_windows: Iterable[FeeWindow],
    ctx: MonthContext,
) -> FeeTotals:
    """
    Sum every fee window's contribution to a month.

    Fees that evaluate to zero or less are left out of both the total and
    the breakdown.  Breakdown order follows input order.
    """
    total = ZERO
    breakdown: list[FeeLine] = []

    for fee in fee_windows:
        amount = fee_for_month(fee, ctx)
        if amount <= 0:
            logger.debug("fee_skipped_nonpositive", extra={
                "fee_name": fee.fee_name,
                "month": ctx.month,
                "amount": amount,
            })
            continue
        breakdown.append(FeeLine(fee_name=fee.fee_name or UNKNOWN_FEE_NAME, amount=amount))
        total += amount

    return FeeTotals(total=total, breakdown=tuple(breakdown))
