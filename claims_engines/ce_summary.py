"""
claims_engines.ce_summary -- The 28-row claims & expense (C&E) statement.

Responsibility:
    Build the monthly and cumulative C&E statement used in client reports,
    including the user-adjustable rows (UC settlement, Rx rebates, stop-loss
    reimbursement).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Rows:
    Medical     #1-7    domestic IP/OP, hospital total, non-hospital,
                        all medical, UC settlement, adjusted medical
    Pharmacy    #8-9    total Rx, Rx rebates (entered negative)
    Stop loss   #10-11  fees (single + family), reimbursement
    Admin       #12-14  consulting, individual fees, total admin
    Totals      #15-16  monthly C&E, cumulative C&E
    Enrollment  #17-18  EE count, member count
    PEPM        #19-21  actual monthly, actual cumulative, target
    Budget      #22-24  PEPM budget, budget EE, cumulative budget
    Variance    #25-28  monthly and cumulative, absolute and fraction

Invariants enforced:
    - #15 = #7 + #8 + #9 + #10 - #11 + #14  (#9 is already negative)
    - Monthly budget = #22 x #17; #24 accumulates it.
    - Variance fractions (#26, #28) are 0 when their budget is 0.
    - No rounding is applied; values are presentation-ready Decimals.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from claims_kernel.domain.values import ZERO
from claims_kernel.logging_config import get_logger
from claims_engines.fee_proration import safe_divide
from claims_engines.tracer import traced_engine

logger = get_logger("engines.ce_summary")


@dataclass(frozen=True)
class CeMonthlyInput:
    """One month of C&E statement inputs."""

    domestic_inpatient: Decimal
    domestic_outpatient: Decimal
    non_hospital_medical: Decimal
    total_rx: Decimal
    ee_count: int
    member_count: int
    pepm_budget: Decimal
    uc_settlement: Decimal = ZERO
    rx_rebates: Decimal = ZERO  # negative
    stop_loss_fees_single: Decimal = ZERO
    stop_loss_fees_family: Decimal = ZERO
    stop_loss_reimbursement: Decimal = ZERO  # positive offset
    consulting_fees: Decimal = ZERO
    individual_fees: Decimal = ZERO  # PEPM/PMPM/flat combined


@dataclass(frozen=True)
class CeCumulative:
    """Running totals carried from the prior month."""

    cumulative_ce: Decimal
    cumulative_budget: Decimal
    avg_ee_ytd: Decimal


@dataclass(frozen=True)
class CeSummaryResult:
    """All 28 statement rows for one month."""

    item1_domestic_inpatient: Decimal
    item2_domestic_outpatient: Decimal
    item3_total_hospital: Decimal
    item4_non_hospital_medical: Decimal
    item5_total_all_medical: Decimal
    item6_uc_settlement: Decimal
    item7_total_adjusted_medical: Decimal
    item8_total_rx: Decimal
    item9_rx_rebates: Decimal
    item10_stop_loss_fees: Decimal
    item11_stop_loss_reimbursement: Decimal
    item12_consulting_fees: Decimal
    item13_individual_fees: Decimal
    item14_total_admin: Decimal
    item15_monthly_ce: Decimal
    item16_cumulative_ce: Decimal
    item17_ee_count: int
    item18_member_count: int
    item19_pepm_actual_monthly: Decimal
    item20_pepm_actual_cumulative: Decimal
    item21_pepm_target: Decimal
    item22_pepm_budget: Decimal
    item23_budget_ee: int
    item24_cumulative_budget: Decimal
    item25_monthly_variance: Decimal
    item26_monthly_variance_percent: Decimal
    item27_cumulative_variance: Decimal
    item28_cumulative_variance_percent: Decimal

    def rows(self) -> tuple[tuple[int, Decimal | int], ...]:
        """(item number, value) pairs in statement order."""
        values = vars(self)
        return tuple(
            (int(name.split("_", 1)[0].removeprefix("item")), value)
            for name, value in values.items()
        )


class CeRowStyle(str, Enum):
    """Display class for a statement row."""

    ADJUSTMENT = "adjustment"
    TOTAL = "total"
    OVER_BUDGET = "over-budget"
    UNDER_BUDGET = "under-budget"
    NEUTRAL = "neutral"


ADJUSTMENT_ROWS = frozenset({6, 9, 11})
TOTAL_ROWS = frozenset({3, 5, 7, 14, 15, 16})
VARIANCE_ROWS = frozenset({25, 26, 27, 28})


def calculate_ce_summary(
    data: CeMonthlyInput,
    cumulative: CeCumulative | None = None,
) -> CeSummaryResult:
    """
    Calculate the statement for a single month.

    Without ``cumulative`` the month is treated as the first of the year:
    cumulative rows equal the monthly rows and the average EE is this
    month's EE count.
    """
    # Medical (#1-7)
    item1 = data.domestic_inpatient
    item2 = data.domestic_outpatient
    item3 = item1 + item2
    item4 = data.non_hospital_medical
    item5 = item3 + item4
    item6 = data.uc_settlement
    item7 = item5 + item6

    # Pharmacy (#8-9)
    item8 = data.total_rx
    item9 = data.rx_rebates

    # Stop loss (#10-11)
    item10 = data.stop_loss_fees_single + data.stop_loss_fees_family
    item11 = data.stop_loss_reimbursement

    # Admin (#12-14)
    item12 = data.consulting_fees
    item13 = data.individual_fees
    item14 = item12 + item13

    # Totals (#15-16)
    item15 = item7 + item8 + item9 + item10 - item11 + item14
    item16 = cumulative.cumulative_ce + item15 if cumulative else item15

    # Enrollment (#17-18)
    item17 = data.ee_count
    item18 = data.member_count

    # PEPM (#19-21)
    item19 = safe_divide(item15, item17)
    avg_ee_ytd = cumulative.avg_ee_ytd if cumulative and cumulative.avg_ee_ytd else Decimal(item17)
    item20 = safe_divide(item16, avg_ee_ytd)
    item21 = data.pepm_budget

    # Budget (#22-24)
    item22 = data.pepm_budget
    item23 = item17
    monthly_budget = item22 * item23
    item24 = cumulative.cumulative_budget + monthly_budget if cumulative else monthly_budget

    # Variance (#25-28)
    item25 = item15 - monthly_budget
    item26 = safe_divide(item25, monthly_budget)
    item27 = item16 - item24
    item28 = safe_divide(item27, item24)

    return CeSummaryResult(
        item1_domestic_inpatient=item1,
        item2_domestic_outpatient=item2,
        item3_total_hospital=item3,
        item4_non_hospital_medical=item4,
        item5_total_all_medical=item5,
        item6_uc_settlement=item6,
        item7_total_adjusted_medical=item7,
        item8_total_rx=item8,
        item9_rx_rebates=item9,
        item10_stop_loss_fees=item10,
        item11_stop_loss_reimbursement=item11,
        item12_consulting_fees=item12,
        item13_individual_fees=item13,
        item14_total_admin=item14,
        item15_monthly_ce=item15,
        item16_cumulative_ce=item16,
        item17_ee_count=item17,
        item18_member_count=item18,
        item19_pepm_actual_monthly=item19,
        item20_pepm_actual_cumulative=item20,
        item21_pepm_target=item21,
        item22_pepm_budget=item22,
        item23_budget_ee=item23,
        item24_cumulative_budget=item24,
        item25_monthly_variance=item25,
        item26_monthly_variance_percent=item26,
        item27_cumulative_variance=item27,
        item28_cumulative_variance_percent=item28,
    )


@traced_engine("ce_summary", "1.0", fingerprint_fields=("monthly_inputs",))
def calculate_ce_summary_ytd(
    monthly_inputs: Sequence[CeMonthlyInput],
) -> tuple[CeSummaryResult, ...]:
    """
    Calculate the statement for consecutive months of a plan year.

    Cumulative C&E and budget are carried forward; the cumulative PEPM uses
    the running average EE count through each month.
    """
    results: list[CeSummaryResult] = []
    cumulative_ce = ZERO
    cumulative_budget = ZERO
    total_ee = 0

    for index, data in enumerate(monthly_inputs):
        total_ee += data.ee_count
        avg_ee_ytd = Decimal(total_ee) / (index + 1)

        result = calculate_ce_summary(
            data,
            CeCumulative(
                cumulative_ce=cumulative_ce,
                cumulative_budget=cumulative_budget,
                avg_ee_ytd=avg_ee_ytd,
            ),
        )
        cumulative_ce = result.item16_cumulative_ce
        cumulative_budget = result.item24_cumulative_budget
        results.append(result)

    logger.info("ce_summary_ytd_calculated", extra={
        "month_count": len(results),
        "cumulative_ce": cumulative_ce,
        "cumulative_budget": cumulative_budget,
    })
    return tuple(results)


def apply_user_adjustments(
    data: CeMonthlyInput,
    *,
    uc_settlement: Decimal | None = None,
    rx_rebates: Decimal | None = None,
    stop_loss_reimbursement: Decimal | None = None,
) -> CeMonthlyInput:
    """Return a copy of ``data`` with any supplied adjustment rows replaced."""
    return replace(
        data,
        uc_settlement=data.uc_settlement if uc_settlement is None else uc_settlement,
        rx_rebates=data.rx_rebates if rx_rebates is None else rx_rebates,
        stop_loss_reimbursement=(
            data.stop_loss_reimbursement
            if stop_loss_reimbursement is None
            else stop_loss_reimbursement
        ),
    )


def classify_ce_row(
    item_number: int,
    value: Decimal | int,
    is_user_adjustment: bool = False,
) -> CeRowStyle:
    """Display class for a statement row."""
    if is_user_adjustment or item_number in ADJUSTMENT_ROWS:
        return CeRowStyle.ADJUSTMENT
    if item_number in TOTAL_ROWS:
        return CeRowStyle.TOTAL
    if item_number in VARIANCE_ROWS:
        return CeRowStyle.OVER_BUDGET if value > 0 else CeRowStyle.UNDER_BUDGET
    return CeRowStyle.NEUTRAL
