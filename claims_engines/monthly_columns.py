"""
claims_engines.monthly_columns -- Monthly detail table, columns A through N.

Responsibility:
    Compute the monthly detail table shown for "All Plans" and for each
    plan, its year-to-date totals, and the check that the per-plan tables
    add up to the All Plans table.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Column formulas:
    E = C + D          total paid (medical + Rx)
    H = E + F + G      net paid; F and G are entered negative
    K = H + I + J      total cost (net + admin + stop-loss fees)
    M = L - K          surplus (+) / deficit (-)
    N = K / L          fraction of budget, 0 when L is 0

Invariants enforced:
    - YTD totals sum every additive column and recompute N from the sums.
    - Reconciliation compares absolute differences against a tolerance
      (one cent by default).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from claims_kernel.domain.values import ZERO
from claims_kernel.logging_config import get_logger
from claims_engines.fee_proration import safe_divide

logger = get_logger("engines.monthly_columns")

DEFAULT_RECONCILIATION_TOLERANCE = Decimal("0.01")

RECONCILED_COLUMNS = (
    "medical_paid",
    "rx_paid",
    "total_paid",
    "net_paid",
    "total_cost",
    "budgeted_premium",
)


@dataclass(frozen=True)
class MonthlyPlanData:
    """Inputs for one month of one plan (or All Plans)."""

    month: date
    plan_id: str
    plan_name: str
    total_subscribers: int  # B
    medical_paid: Decimal  # C
    rx_paid: Decimal  # D
    admin_fees: Decimal  # I
    stop_loss_fees: Decimal  # J
    budgeted_premium: Decimal  # L
    spec_stop_loss_reimb: Decimal = ZERO  # F, negative
    est_rx_rebates: Decimal = ZERO  # G, negative


@dataclass(frozen=True)
class ColumnTotals:
    """Columns B through N; the month-less shape used for YTD totals."""

    total_subscribers: int
    medical_paid: Decimal
    rx_paid: Decimal
    total_paid: Decimal
    spec_stop_loss_reimb: Decimal
    est_rx_rebates: Decimal
    net_paid: Decimal
    admin_fees: Decimal
    stop_loss_fees: Decimal
    total_cost: Decimal
    budgeted_premium: Decimal
    surplus_deficit: Decimal
    percent_of_budget: Decimal


@dataclass(frozen=True)
class MonthlyColumnsResult(ColumnTotals):
    """Columns A through N for one month."""

    month: date | None = None


@dataclass(frozen=True)
class ReconciliationResult:
    match: bool
    differences: dict[str, Decimal]


def calculate_monthly_columns(data: MonthlyPlanData) -> MonthlyColumnsResult:
    """Calculate columns A-N for a single month."""
    total_paid = data.medical_paid + data.rx_paid
    net_paid = total_paid + data.spec_stop_loss_reimb + data.est_rx_rebates
    total_cost = net_paid + data.admin_fees + data.stop_loss_fees
    surplus_deficit = data.budgeted_premium - total_cost
    percent_of_budget = safe_divide(total_cost, data.budgeted_premium)

    return MonthlyColumnsResult(
        month=data.month,
        total_subscribers=data.total_subscribers,
        medical_paid=data.medical_paid,
        rx_paid=data.rx_paid,
        total_paid=total_paid,
        spec_stop_loss_reimb=data.spec_stop_loss_reimb,
        est_rx_rebates=data.est_rx_rebates,
        net_paid=net_paid,
        admin_fees=data.admin_fees,
        stop_loss_fees=data.stop_loss_fees,
        total_cost=total_cost,
        budgeted_premium=data.budgeted_premium,
        surplus_deficit=surplus_deficit,
        percent_of_budget=percent_of_budget,
    )


def calculate_monthly_columns_for_period(
    data_points: Sequence[MonthlyPlanData],
) -> tuple[MonthlyColumnsResult, ...]:
    return tuple(calculate_monthly_columns(d) for d in data_points)


def calculate_ytd_totals(monthly_results: Sequence[ColumnTotals]) -> ColumnTotals:
    """Sum columns across months; N is recalculated from the summed K and L."""

    def total(field: str) -> Decimal:
        return sum((getattr(m, field) for m in monthly_results), ZERO)

    total_cost = total("total_cost")
    budgeted_premium = total("budgeted_premium")

    return ColumnTotals(
        total_subscribers=sum(m.total_subscribers for m in monthly_results),
        medical_paid=total("medical_paid"),
        rx_paid=total("rx_paid"),
        total_paid=total("total_paid"),
        spec_stop_loss_reimb=total("spec_stop_loss_reimb"),
        est_rx_rebates=total("est_rx_rebates"),
        net_paid=total("net_paid"),
        admin_fees=total("admin_fees"),
        stop_loss_fees=total("stop_loss_fees"),
        total_cost=total_cost,
        budgeted_premium=budgeted_premium,
        surplus_deficit=total("surplus_deficit"),
        percent_of_budget=safe_divide(total_cost, budgeted_premium),
    )


def reconcile_monthly_data(
    all_plans: ColumnTotals,
    per_plan: Sequence[ColumnTotals],
    tolerance: Decimal = DEFAULT_RECONCILIATION_TOLERANCE,
) -> ReconciliationResult:
    """
    Check that the per-plan figures sum to the All Plans figures.

    Returns the absolute difference for each reconciled column and whether
    every difference is within ``tolerance``.
    """
    differences = {
        column: abs(
            getattr(all_plans, column)
            - sum((getattr(plan, column) for plan in per_plan), ZERO)
        )
        for column in RECONCILED_COLUMNS
    }
    match = all(diff <= tolerance for diff in differences.values())

    if not match:
        logger.warning("monthly_reconciliation_mismatch", extra={
            "plan_count": len(per_plan),
            "differences": {k: str(v) for k, v in differences.items() if v > tolerance},
        })

    return ReconciliationResult(match=match, differences=differences)
