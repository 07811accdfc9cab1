"""
claims_engines.variance -- Monthly budget-vs-actual variance calculation.

Responsibility:
    For one month, combine the claims actuals, the matching monthly budget
    overlay, the FIXED fee windows and the rounding policy into a single
    ``MonthlyCalculation``: claims, fixed costs, adjustments, actual and
    budget totals, variance in dollars and percent, PEPM and PEPEM.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import claims_kernel.domain and sibling engine modules.
    Consumed by ``claims_engines.budget_vs_actuals``.

Invariants enforced:
    - actual_total_expenses = total_claims + fixed_costs
                              - stop_loss_reimb - rx_rebates
    - budget_total_expenses = expected_claims + fixed_costs.  Fixed costs
      are the same figure on both sides; there is no separate budgeted fee
      schedule.
    - variance_percent = variance_dollars / budget_total_expenses * 100,
      and 0 when the budget is 0.
    - pepm = actual / member_count; pepem = actual / ee_count.
    - Every monetary output is rounded with the plan's policy; the variance
      percent is rounded at two decimals.

Failure modes:
    - None for well-typed input.  A month with no overlay is computed with
      zero expected claims and zero adjustments.

Usage:
    from claims_engines.variance import compute_month, index_configs

    configs_by_month = index_configs(configs)
    calc = compute_month(
        actual,
        configs_by_month.get(month_start(actual.service_month)),
        fee_windows,
        budget_config,
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from claims_kernel.domain.values import (
    ZERO,
    BudgetConfig,
    FeeWindow,
    MonthlyActuals,
    MonthlyConfig,
    PctClaimsBase,
    month_start,
)
from claims_kernel.logging_config import get_logger
from claims_engines.fee_proration import (
    FeeLine,
    MonthContext,
    calculate_monthly_fees,
    safe_divide,
)
from claims_engines.rounding import RoundingPolicy

logger = get_logger("engines.variance")

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class MonthlyCalculation:
    """
    Computed variance record for one service month.

    All monetary fields are rounded; ``variance_percent`` is a percentage
    (4.35 means 4.35 %) rounded to two decimals.
    """

    month: date
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

    @property
    def is_favorable(self) -> bool:
        """True when the month came in under budget."""
        return self.variance_dollars < 0


def index_configs(configs: Iterable[MonthlyConfig]) -> dict[date, MonthlyConfig]:
    """
    Key monthly overlays by their normalised service month.

    When two overlays share a month the first one supplied wins.
    """
    index: dict[date, MonthlyConfig] = {}
    for config in configs:
        index.setdefault(month_start(config.service_month), config)
    return index


def fixed_fee_windows(fee_windows: Iterable[FeeWindow]) -> tuple[FeeWindow, ...]:
    """Fee windows tagged for the FIXED cost bucket, in input order."""
    return tuple(fw for fw in fee_windows if fw.is_fixed)


def compute_month(
    actual: MonthlyActuals,
    config: MonthlyConfig | None,
    fee_windows: Sequence[FeeWindow],
    budget_config: BudgetConfig,
) -> MonthlyCalculation:
    """
    Compute the variance record for one month of actuals.

    Preconditions:
        ``config`` is the overlay for the same service month, or None.
    Postconditions:
        Returns a new MonthlyCalculation; no input is modified.
    """
    month = month_start(actual.service_month)
    policy = RoundingPolicy.from_config(budget_config)

    if config is not None and month_start(config.service_month) != month:
        logger.warning("monthly_config_month_mismatch", extra={
            "month": month,
            "config_month": config.service_month,
        })
        config = None

    expected_claims = config.expected_claims if config else ZERO
    stop_loss_reimb = config.stop_loss_reimb if config else ZERO
    rx_rebates = config.rx_rebates if config else ZERO

    total_claims = actual.total_claims

    ctx = MonthContext(
        month=month,
        members=actual.member_count,
        employees=actual.ee_count,
        total_claims=total_claims,
        expected_claims=expected_claims,
        pct_base=budget_config.pct_claims_base or PctClaimsBase.ACTUAL,
    )

    fees = calculate_monthly_fees(fixed_fee_windows(fee_windows), ctx)
    fixed_costs = fees.total

    # Claims + Fixed Costs - Stop Loss Reimbursements - Rx Rebates
    actual_total_expenses = total_claims + fixed_costs - stop_loss_reimb - rx_rebates

    expected_claims_budget = expected_claims
    budgeted_fixed_costs = fixed_costs
    budget_total_expenses = expected_claims_budget + budgeted_fixed_costs

    variance_dollars = actual_total_expenses - budget_total_expenses
    variance_percent = safe_divide(variance_dollars, budget_total_expenses) * HUNDRED

    pepm = safe_divide(actual_total_expenses, actual.member_count)
    pepem = safe_divide(actual_total_expenses, actual.ee_count)

    logger.debug("month_computed", extra={
        "month": month,
        "has_config": config is not None,
        "fee_lines": len(fees.breakdown),
        "actual_total_expenses": actual_total_expenses,
        "budget_total_expenses": budget_total_expenses,
    })

    return MonthlyCalculation(
        month=month,
        ee_count=actual.ee_count,
        member_count=actual.member_count,
        total_claims=policy.money(total_claims),
        fixed_costs=policy.money(fixed_costs),
        fixed_costs_breakdown=tuple(
            FeeLine(fee_name=line.fee_name, amount=policy.money(line.amount))
            for line in fees.breakdown
        ),
        stop_loss_reimb=policy.money(stop_loss_reimb),
        rx_rebates=policy.money(rx_rebates),
        actual_total_expenses=policy.money(actual_total_expenses),
        expected_claims_budget=policy.money(expected_claims_budget),
        budgeted_fixed_costs=policy.money(budgeted_fixed_costs),
        budget_total_expenses=policy.money(budget_total_expenses),
        variance_dollars=policy.money(variance_dollars),
        variance_percent=policy.percent(variance_percent),
        pepm=policy.money(pepm),
        pepem=policy.money(pepem),
    )
