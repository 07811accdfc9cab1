"""
Module: claims_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for claims_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import claims_kernel (and sibling engine modules).
    MUST NOT import claims_config or claims_services.

Invariants enforced:
    - Purity: engines never read the clock.  Months and dates are passed in.
    - Decimal-only arithmetic: floats never touch a monetary amount.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - Engines do not raise for financial edge cases.  Zero denominators
      give Decimal("0"); missing overlays count as zero.

Audit relevance:
    Report-level engines are wrapped by ``@traced_engine`` (see
    ``claims_engines.tracer``), emitting CLAIMS_ENGINE_TRACE records with
    engine name, version, input fingerprint and duration.

Usage:
    from claims_engines import calculate_monthly_stats
    from claims_engines.fee_proration import prorate_for_month
    from claims_engines.ce_summary import calculate_ce_summary_ytd
"""

from claims_kernel.logging_config import get_logger

logger = get_logger("engines")

from claims_engines.aggregation import VarianceAggregate, aggregate
from claims_engines.budget_vs_actuals import (
    TRAILING_WINDOW_MONTHS,
    YTDSummary,
    calculate_monthly_stats,
)
from claims_engines.ce_summary import (
    CeCumulative,
    CeMonthlyInput,
    CeRowStyle,
    CeSummaryResult,
    apply_user_adjustments,
    calculate_ce_summary,
    calculate_ce_summary_ytd,
    classify_ce_row,
)
from claims_engines.executive import (
    ClaimantBuckets,
    ExecutiveYtdResult,
    FuelGaugeStatus,
    PlanCost,
    PlanMixEntry,
    calculate_claimant_buckets,
    calculate_executive_ytd,
    calculate_plan_mix,
    generate_executive_observation,
)
from claims_engines.fee_proration import (
    FeeLine,
    FeeTotals,
    MonthContext,
    calculate_monthly_fees,
    fee_for_month,
    prorate_for_month,
    safe_divide,
)
from claims_engines.high_claimants import (
    ClaimantStatus,
    HighClaimantInput,
    HighClaimantResult,
    HighClaimantSummary,
    calculate_status_distribution,
    calculate_stop_loss_reimbursement_ytd,
    filter_by_isl_threshold,
    generate_high_claimant_observation,
    group_claimants_by_plan,
    process_high_claimants,
)
from claims_engines.monthly_columns import (
    ColumnTotals,
    MonthlyColumnsResult,
    MonthlyPlanData,
    ReconciliationResult,
    calculate_monthly_columns,
    calculate_monthly_columns_for_period,
    calculate_ytd_totals,
    reconcile_monthly_data,
)
from claims_engines.pepm_trend import (
    CostMonth,
    PepmMonth,
    PepmResult,
    calculate_multiple_pepm,
    calculate_pepm,
    format_pepm,
)
from claims_engines.rounding import RoundingPolicy, apply_rounding, round_percent
from claims_engines.tracer import traced_engine
from claims_engines.variance import MonthlyCalculation, compute_month

__all__ = [
    # Aggregation
    "VarianceAggregate",
    "aggregate",
    # Entry point
    "TRAILING_WINDOW_MONTHS",
    "YTDSummary",
    "calculate_monthly_stats",
    # C&E statement
    "CeCumulative",
    "CeMonthlyInput",
    "CeRowStyle",
    "CeSummaryResult",
    "apply_user_adjustments",
    "calculate_ce_summary",
    "calculate_ce_summary_ytd",
    "classify_ce_row",
    # Executive
    "ClaimantBuckets",
    "ExecutiveYtdResult",
    "FuelGaugeStatus",
    "PlanCost",
    "PlanMixEntry",
    "calculate_claimant_buckets",
    "calculate_executive_ytd",
    "calculate_plan_mix",
    "generate_executive_observation",
    # Fees
    "FeeLine",
    "FeeTotals",
    "MonthContext",
    "calculate_monthly_fees",
    "fee_for_month",
    "prorate_for_month",
    "safe_divide",
    # High-cost claimants
    "ClaimantStatus",
    "HighClaimantInput",
    "HighClaimantResult",
    "HighClaimantSummary",
    "calculate_status_distribution",
    "calculate_stop_loss_reimbursement_ytd",
    "filter_by_isl_threshold",
    "generate_high_claimant_observation",
    "group_claimants_by_plan",
    "process_high_claimants",
    # Monthly detail columns
    "ColumnTotals",
    "MonthlyColumnsResult",
    "MonthlyPlanData",
    "ReconciliationResult",
    "calculate_monthly_columns",
    "calculate_monthly_columns_for_period",
    "calculate_ytd_totals",
    "reconcile_monthly_data",
    # PEPM trend
    "CostMonth",
    "PepmMonth",
    "PepmResult",
    "calculate_multiple_pepm",
    "calculate_pepm",
    "format_pepm",
    # Rounding
    "RoundingPolicy",
    "apply_rounding",
    "round_percent",
    # Tracing
    "traced_engine",
    # Variance
    "MonthlyCalculation",
    "compute_month",
]
