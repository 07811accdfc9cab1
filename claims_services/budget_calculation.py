"""
claims_services.budget_calculation -- Budget-vs-actuals calculation service.

Responsibility:
    The caller-facing way to produce a plan year's budget-vs-actuals
    summary from raw rows: coerce, order, apply the default policy, run
    the engine.

Architecture position:
    Services -- orchestration over engines + config + kernel.
    Holds no persistence; the caller fetches rows and stores results.

Invariants enforced:
    - Actuals reach the engine sorted ascending by service month.
    - A plan year with no actuals is an error, never an empty report.
    - Every log record emitted during a calculation carries the
      plan_year_id via LogContext.

Failure modes:
    - NoActualsFoundError when the actual set is empty.
    - InputError subclasses from row coercion.

Usage:
    from claims_services import BudgetCalculationService

    service = BudgetCalculationService()
    summary = service.calculate("PY2025", actual_rows, config_rows, fee_rows)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from claims_config import get_budget_config
from claims_engines.budget_vs_actuals import YTDSummary, calculate_monthly_stats
from claims_kernel.domain.values import (
    BudgetConfig,
    FeeWindow,
    MonthlyActuals,
    MonthlyConfig,
)
from claims_kernel.exceptions import NoActualsFoundError
from claims_kernel.logging_config import LogContext, get_logger
from claims_services.coercion import (
    coerce_actuals_row,
    coerce_budget_config_row,
    coerce_config_row,
    coerce_fee_window_row,
)

logger = get_logger("services.budget_calculation")

Row = Mapping[str, Any]


def _as_actuals(items: Sequence[MonthlyActuals | Row]) -> list[MonthlyActuals]:
    return [i if isinstance(i, MonthlyActuals) else coerce_actuals_row(i) for i in items]


def _as_configs(items: Sequence[MonthlyConfig | Row]) -> list[MonthlyConfig]:
    return [i if isinstance(i, MonthlyConfig) else coerce_config_row(i) for i in items]


def _as_fee_windows(items: Sequence[FeeWindow | Row]) -> list[FeeWindow]:
    return [i if isinstance(i, FeeWindow) else coerce_fee_window_row(i) for i in items]


class BudgetCalculationService:
    """
    Runs the budget-vs-actuals engine for one plan year at a time.

    Contract:
        Accepts domain records or raw rows for every input collection.
    Guarantees:
        - Stateless between calls; one instance may serve many plan years.
        - The default policy comes from ``claims_config`` when the caller
          supplies none.
    Non-goals:
        - Does not fetch or store data.
    """

    def __init__(self, default_budget_config: BudgetConfig | None = None):
        self._default_budget_config = default_budget_config

    def _resolve_budget_config(self, budget_config: BudgetConfig | Row | None) -> BudgetConfig:
        if isinstance(budget_config, BudgetConfig):
            return budget_config
        if budget_config is not None:
            return coerce_budget_config_row(budget_config)
        if self._default_budget_config is not None:
            return self._default_budget_config
        return get_budget_config()

    def calculate(
        self,
        plan_year_id: str,
        actuals: Sequence[MonthlyActuals | Row],
        configs: Sequence[MonthlyConfig | Row] = (),
        fee_windows: Sequence[FeeWindow | Row] = (),
        budget_config: BudgetConfig | Row | None = None,
    ) -> YTDSummary:
        """
        Compute the budget-vs-actuals summary for ``plan_year_id``.

        Raises:
            NoActualsFoundError: if ``actuals`` is empty.
        """
        with LogContext.bind(plan_year_id=str(plan_year_id)):
            if not actuals:
                logger.warning("budget_calculation_no_actuals")
                raise NoActualsFoundError(str(plan_year_id))

            ordered = sorted(_as_actuals(actuals), key=lambda a: a.service_month)
            monthly_configs = _as_configs(configs)
            windows = _as_fee_windows(fee_windows)
            policy = self._resolve_budget_config(budget_config)

            logger.info("budget_calculation_started", extra={
                "month_count": len(ordered),
                "first_month": ordered[0].service_month,
                "last_month": ordered[-1].service_month,
            })

            summary = calculate_monthly_stats(ordered, monthly_configs, windows, policy)

            logger.info("budget_calculation_completed", extra={
                "month_count": len(summary.months),
                "ytd_variance_dollars": summary.ytd.variance_dollars,
                "ytd_variance_percent": summary.ytd.variance_percent,
            })
            return summary
