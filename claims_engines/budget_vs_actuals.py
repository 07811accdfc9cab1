"""
claims_engines.budget_vs_actuals -- Plan-year budget-vs-actuals entry point.

Responsibility:
    Run the monthly variance calculator over every month of actuals and
    summarise the result twice: year-to-date (all months) and the trailing
    three months.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Called by ``claims_services.budget_calculation``.

Invariants enforced:
    - Exactly one MonthlyCalculation per supplied actual, in input order.
      Callers sort actuals ascending by service month.
    - Inputs are read-only; the summary holds new tuples of frozen records.
    - No state survives a call, so plan years may be computed concurrently.

Failure modes:
    - None for well-typed input.  Empty actuals give an empty month list and
      two all-zero aggregates.

Usage:
    from claims_engines.budget_vs_actuals import calculate_monthly_stats

    summary = calculate_monthly_stats(actuals, configs, fee_windows, budget_config)
    summary.ytd.variance_percent
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from claims_kernel.domain.values import (
    BudgetConfig,
    ClaimsModelType,
    FeeWindow,
    MonthlyActuals,
    MonthlyConfig,
    month_start,
)
from claims_kernel.logging_config import get_logger
from claims_engines.aggregation import VarianceAggregate, aggregate
from claims_engines.tracer import traced_engine
from claims_engines.variance import MonthlyCalculation, compute_month, index_configs

logger = get_logger("engines.budget_vs_actuals")

TRAILING_WINDOW_MONTHS = 3


@dataclass(frozen=True)
class YTDSummary:
    """Monthly records plus year-to-date and trailing-quarter summaries."""

    months: tuple[MonthlyCalculation, ...]
    ytd: VarianceAggregate
    last_three_months: VarianceAggregate


@traced_engine(
    "budget_vs_actuals",
    "1.0",
    fingerprint_fields=("actuals", "configs", "fee_windows", "budget_config"),
)
def calculate_monthly_stats(
    actuals: Sequence[MonthlyActuals],
    configs: Sequence[MonthlyConfig],
    fee_windows: Sequence[FeeWindow],
    budget_config: BudgetConfig,
) -> YTDSummary:
    """
    Compute the budget-vs-actuals summary for one plan year.

    Args:
        actuals: One record per month, sorted ascending by service month.
        configs: Monthly budget overlays; months without one count as zero
            expected claims and no adjustments.
        fee_windows: Fee schedule; only FIXED windows contribute.
        budget_config: Rounding and percent-of-claims policy.

    Returns:
        YTDSummary with ``months``, ``ytd`` and ``last_three_months``.
    """
    logger.info("monthly_stats_started", extra={
        "month_count": len(actuals),
        "config_count": len(configs),
        "fee_window_count": len(fee_windows),
        "rounding_mode": budget_config.rounding_mode,
        "currency_precision": budget_config.currency_precision,
    })

    if budget_config.claims_model_type != ClaimsModelType.DIRECT:
        logger.warning("claims_model_not_implemented", extra={
            "claims_model_type": budget_config.claims_model_type,
            "applied_model": ClaimsModelType.DIRECT,
        })

    configs_by_month = index_configs(configs)
    fees = tuple(fee_windows)

    months = tuple(
        compute_month(
            actual,
            configs_by_month.get(month_start(actual.service_month)),
            fees,
            budget_config,
        )
        for actual in actuals
    )

    ytd = aggregate(months, budget_config)
    last_three_months = aggregate(months[-TRAILING_WINDOW_MONTHS:], budget_config)

    logger.info("monthly_stats_completed", extra={
        "month_count": len(months),
        "ytd_actual_total_expenses": ytd.actual_total_expenses,
        "ytd_budget_total_expenses": ytd.budget_total_expenses,
        "ytd_variance_percent": ytd.variance_percent,
    })

    return YTDSummary(months=months, ytd=ytd, last_three_months=last_three_months)
