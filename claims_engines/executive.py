"""
claims_engines.executive -- Executive summary metrics.

Responsibility:
    Year-to-date headline figures for the executive page: plan cost against
    budgeted premium with a fuel-gauge status, the medical/pharmacy split,
    plan mix, high-claim buckets, and a short plain-English observation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes ``claims_engines.monthly_columns`` results.

Invariants enforced:
    - Total plan cost = net paid + admin fees + stop-loss fees + IBNR.
    - Surplus/deficit = budgeted premium - total plan cost.
    - percent_of_budget is a fraction (0.94 = 94 %); 0 when premium is 0.
    - Fuel gauge: GREEN below 0.95, YELLOW from 0.95 through 1.05, RED above.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from claims_kernel.domain.values import ZERO
from claims_kernel.logging_config import get_logger
from claims_engines.fee_proration import safe_divide
from claims_engines.monthly_columns import ColumnTotals
from claims_engines.tracer import traced_engine

logger = get_logger("engines.executive")

GAUGE_GREEN_BELOW = Decimal("0.95")
GAUGE_YELLOW_THROUGH = Decimal("1.05")

HIGH_CLAIM_THRESHOLD = Decimal("200000")
MID_CLAIM_THRESHOLD = Decimal("100000")


class FuelGaugeStatus(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


@dataclass(frozen=True)
class ExecutiveYtdResult:
    budgeted_premium: Decimal
    total_paid: Decimal
    net_paid: Decimal
    admin_fees: Decimal
    stop_loss_fees: Decimal
    ibnr: Decimal
    total_plan_cost: Decimal
    surplus_deficit: Decimal
    percent_of_budget: Decimal
    fuel_gauge_status: FuelGaugeStatus
    medical_total: Decimal
    rx_total: Decimal
    medical_percent: Decimal
    rx_percent: Decimal


@dataclass(frozen=True)
class PlanCost:
    plan_name: str
    total_cost: Decimal


@dataclass(frozen=True)
class PlanMixEntry:
    plan_name: str
    total_cost: Decimal
    percent: Decimal


@dataclass(frozen=True)
class ClaimBucket:
    count: int = 0
    total: Decimal = ZERO


@dataclass(frozen=True)
class ClaimantBuckets:
    over_200k: ClaimBucket
    range_100k_to_200k: ClaimBucket
    under_100k: ClaimBucket


def fuel_gauge_status(percent_of_budget: Decimal) -> FuelGaugeStatus:
    if percent_of_budget < GAUGE_GREEN_BELOW:
        return FuelGaugeStatus.GREEN
    if percent_of_budget <= GAUGE_YELLOW_THROUGH:
        return FuelGaugeStatus.YELLOW
    return FuelGaugeStatus.RED


@traced_engine("executive", "1.0", fingerprint_fields=("months", "ibnr"))
def calculate_executive_ytd(
    months: Sequence[ColumnTotals],
    ibnr: Decimal = ZERO,
) -> ExecutiveYtdResult:
    """
    Calculate executive year-to-date metrics from monthly detail columns.

    Args:
        months: Monthly A-N results for the period.
        ibnr: Incurred-but-not-reported reserve added to plan cost.
    """

    def total(field: str) -> Decimal:
        return sum((getattr(m, field) for m in months), ZERO)

    budgeted_premium = total("budgeted_premium")
    total_paid = total("total_paid")
    net_paid = total("net_paid")
    admin_fees = total("admin_fees")
    stop_loss_fees = total("stop_loss_fees")

    total_plan_cost = net_paid + admin_fees + stop_loss_fees + ibnr
    surplus_deficit = budgeted_premium - total_plan_cost
    percent_of_budget = safe_divide(total_plan_cost, budgeted_premium)

    medical_total = total("medical_paid")
    rx_total = total("rx_paid")
    combined_total = medical_total + rx_total

    result = ExecutiveYtdResult(
        budgeted_premium=budgeted_premium,
        total_paid=total_paid,
        net_paid=net_paid,
        admin_fees=admin_fees,
        stop_loss_fees=stop_loss_fees,
        ibnr=ibnr,
        total_plan_cost=total_plan_cost,
        surplus_deficit=surplus_deficit,
        percent_of_budget=percent_of_budget,
        fuel_gauge_status=fuel_gauge_status(percent_of_budget),
        medical_total=medical_total,
        rx_total=rx_total,
        medical_percent=safe_divide(medical_total, combined_total),
        rx_percent=safe_divide(rx_total, combined_total),
    )

    logger.info("executive_ytd_calculated", extra={
        "month_count": len(months),
        "total_plan_cost": total_plan_cost,
        "percent_of_budget": percent_of_budget,
        "fuel_gauge_status": result.fuel_gauge_status,
    })
    return result


def calculate_plan_mix(plans: Sequence[PlanCost]) -> tuple[PlanMixEntry, ...]:
    """Each plan's share of total cost."""
    grand_total = sum((p.total_cost for p in plans), ZERO)
    return tuple(
        PlanMixEntry(
            plan_name=p.plan_name,
            total_cost=p.total_cost,
            percent=safe_divide(p.total_cost, grand_total),
        )
        for p in plans
    )


def calculate_claimant_buckets(totals_paid: Sequence[Decimal]) -> ClaimantBuckets:
    """Count and total claimants at $200k+, $100k-$200k and under $100k."""
    over: list[Decimal] = []
    mid: list[Decimal] = []
    under: list[Decimal] = []
    for paid in totals_paid:
        if paid >= HIGH_CLAIM_THRESHOLD:
            over.append(paid)
        elif paid >= MID_CLAIM_THRESHOLD:
            mid.append(paid)
        else:
            under.append(paid)

    def bucket(values: list[Decimal]) -> ClaimBucket:
        return ClaimBucket(count=len(values), total=sum(values, ZERO))

    return ClaimantBuckets(
        over_200k=bucket(over),
        range_100k_to_200k=bucket(mid),
        under_100k=bucket(under),
    )


def format_currency(value: Decimal, decimals: int = 0) -> str:
    """US dollar display string, e.g. ``$1,234``."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{decimals}f}"


def format_percent(fraction: Decimal, decimals: int = 1) -> str:
    """Fraction as a percent string, e.g. ``0.943`` -> ``94.3%``."""
    return f"{fraction * 100:.{decimals}f}%"


def generate_executive_observation(result: ExecutiveYtdResult) -> str:
    """Plain-English summary sentence(s) for the executive page."""
    observations: list[str] = []

    if result.percent_of_budget < GAUGE_GREEN_BELOW:
        observations.append(
            "Plan is under budget for the rolling 12 and current plan year to date."
        )
    elif result.percent_of_budget > GAUGE_YELLOW_THROUGH:
        observations.append(
            f"Plan is over budget at {format_percent(result.percent_of_budget)} "
            f"of budgeted premium."
        )

    observations.append(
        f"Medical claims represent {format_percent(result.medical_percent)} of total paid, "
        f"pharmacy {format_percent(result.rx_percent)}."
    )

    if result.surplus_deficit > 0:
        observations.append(f"Year-to-date surplus: {format_currency(result.surplus_deficit)}.")
    elif result.surplus_deficit < 0:
        observations.append(f"Year-to-date deficit: {format_currency(abs(result.surplus_deficit))}.")

    return " ".join(observations)
