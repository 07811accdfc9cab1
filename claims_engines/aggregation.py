"""
claims_engines.aggregation -- Summaries over a run of monthly variance records.

Responsibility:
    Reduce any slice of ``MonthlyCalculation`` records (the whole plan year,
    the trailing quarter) into one ``VarianceAggregate`` with the same shape
    minus the month.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Additive fields are summed from the (already rounded) monthly values,
      so a year-to-date total always equals the sum of its months.
    - Ratios are recomputed from the sums, never averaged:
        variance_percent = (sum actual - sum budget) / sum budget * 100
        pepm  = sum actual / sum member months
        pepem = sum actual / sum employee months
    - The fee breakdown is empty; it is a per-month diagnostic only.
    - An empty slice yields the all-zero aggregate.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from claims_kernel.domain.values import DEFAULT_BUDGET_CONFIG, ZERO, BudgetConfig
from claims_kernel.logging_config import get_logger
from claims_engines.fee_proration import FeeLine, safe_divide
from claims_engines.rounding import RoundingPolicy
from claims_engines.variance import HUNDRED, MonthlyCalculation

logger = get_logger("engines.aggregation")


@dataclass(frozen=True)
class VarianceAggregate:
    """A MonthlyCalculation summed over several months, without the month."""

    ee_count: int
    member_count: int
    total_claims: Decimal
    fixed_costs: Decimal
    fixed_costs_breakdown: tuple[FeeLine, ...]
    stop_loss_reimb: Decimal
    rx_rebates: Decimal
    actual_total_expenses: Decimal
    expected_claims_budget: Decimal
    budgeted_fixed_costs: Decimal
    budget_total_expenses: Decimal
    variance_dollars: Decimal
    variance_percent: Decimal
    pepm: Decimal
    pepem: Decimal

    @classmethod
    def zero(cls) -> VarianceAggregate:
        return cls(
            ee_count=0,
            member_count=0,
            total_claims=ZERO,
            fixed_costs=ZERO,
            fixed_costs_breakdown=(),
            stop_loss_reimb=ZERO,
            rx_rebates=ZERO,
            actual_total_expenses=ZERO,
            expected_claims_budget=ZERO,
            budgeted_fixed_costs=ZERO,
            budget_total_expenses=ZERO,
            variance_dollars=ZERO,
            variance_percent=ZERO,
            pepm=ZERO,
            pepem=ZERO,
        )


def _sum(calcs: Sequence[MonthlyCalculation], field: str) -> Decimal:
    return sum((getattr(c, field) for c in calcs), ZERO)


def aggregate(
    calcs: Sequence[MonthlyCalculation],
    budget_config: BudgetConfig | None = None,
) -> VarianceAggregate:
    """
    Summarise a slice of monthly records.

    Args:
        calcs: Monthly records to combine (any subset, any length).
        budget_config: Rounding policy source; defaults to HALF_UP at 2dp.
    """
    if not calcs:
        return VarianceAggregate.zero()

    policy = RoundingPolicy.from_config(budget_config or DEFAULT_BUDGET_CONFIG)

    total_claims = _sum(calcs, "total_claims")
    fixed_costs = _sum(calcs, "fixed_costs")
    stop_loss_reimb = _sum(calcs, "stop_loss_reimb")
    rx_rebates = _sum(calcs, "rx_rebates")
    actual_total_expenses = _sum(calcs, "actual_total_expenses")
    budget_total_expenses = _sum(calcs, "budget_total_expenses")
    expected_claims_budget = _sum(calcs, "expected_claims_budget")

    total_members = sum(c.member_count for c in calcs)
    total_employees = sum(c.ee_count for c in calcs)

    variance_dollars = actual_total_expenses - budget_total_expenses
    variance_percent = safe_divide(variance_dollars, budget_total_expenses) * HUNDRED

    logger.debug("aggregate_computed", extra={
        "month_count": len(calcs),
        "actual_total_expenses": actual_total_expenses,
        "budget_total_expenses": budget_total_expenses,
    })

    return VarianceAggregate(
        ee_count=total_employees,
        member_count=total_members,
        total_claims=policy.money(total_claims),
        fixed_costs=policy.money(fixed_costs),
        fixed_costs_breakdown=(),
        stop_loss_reimb=policy.money(stop_loss_reimb),
        rx_rebates=policy.money(rx_rebates),
        actual_total_expenses=policy.money(actual_total_expenses),
        expected_claims_budget=policy.money(expected_claims_budget),
        budgeted_fixed_costs=policy.money(fixed_costs),
        budget_total_expenses=policy.money(budget_total_expenses),
        variance_dollars=policy.money(variance_dollars),
        variance_percent=policy.percent(variance_percent),
        pepm=policy.money(safe_divide(actual_total_expenses, total_members)),
        pepem=policy.money(safe_divide(actual_total_expenses, total_employees)),
    )
