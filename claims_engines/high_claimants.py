"""
claims_engines.high_claimants -- High-cost claimant analysis against the ISL.

Responsibility:
    Identify claimants whose combined medical and Rx paid reaches half of
    the individual stop-loss (ISL) deductible, and split each one's cost
    between the employer (up to the ISL) and the stop-loss carrier (the
    excess).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - total_paid = med_paid + rx_paid
    - employer_share = min(total_paid, isl); stop_loss_share = max(0, total_paid - isl)
    - employer_share + stop_loss_share = total_paid for every claimant
    - Qualifying claimants are sorted by total paid, highest first.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from claims_kernel.domain.values import ZERO
from claims_kernel.logging_config import get_logger
from claims_engines.executive import format_currency
from claims_engines.fee_proration import safe_divide
from claims_engines.tracer import traced_engine

logger = get_logger("engines.high_claimants")

DEFAULT_ISL_THRESHOLD = Decimal("200000")
QUALIFYING_FRACTION = Decimal("0.5")


class ClaimantStatus(str, Enum):
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
    PENDING = "PENDING"


@dataclass(frozen=True)
class HighClaimantInput:
    claimant_key: str
    plan_name: str
    status: ClaimantStatus | str
    med_paid: Decimal
    rx_paid: Decimal


@dataclass(frozen=True)
class HighClaimantResult:
    claimant_key: str
    plan_name: str
    status: ClaimantStatus | str
    med_paid: Decimal
    rx_paid: Decimal
    total_paid: Decimal
    percent_of_isl: Decimal
    amount_exceeding_isl: Decimal
    employer_share: Decimal
    stop_loss_share: Decimal


@dataclass(frozen=True)
class HighClaimantSummary:
    isl_threshold: Decimal
    qualifying_threshold: Decimal
    claimants: tuple[HighClaimantResult, ...]
    total_claimants: int
    total_paid: Decimal
    total_exceeding_isl: Decimal
    employer_total: Decimal
    stop_loss_total: Decimal


@dataclass(frozen=True)
class StatusDistribution:
    active: int = 0
    resolved: int = 0
    pending: int = 0


def qualifying_threshold(isl_threshold: Decimal) -> Decimal:
    return isl_threshold * QUALIFYING_FRACTION


def _evaluate(claimant: HighClaimantInput, isl_threshold: Decimal) -> HighClaimantResult:
    total_paid = claimant.med_paid + claimant.rx_paid
    excess = max(ZERO, total_paid - isl_threshold)
    return HighClaimantResult(
        claimant_key=claimant.claimant_key,
        plan_name=claimant.plan_name,
        status=claimant.status,
        med_paid=claimant.med_paid,
        rx_paid=claimant.rx_paid,
        total_paid=total_paid,
        percent_of_isl=safe_divide(total_paid, isl_threshold),
        amount_exceeding_isl=excess,
        employer_share=min(total_paid, isl_threshold),
        stop_loss_share=excess,
    )


@traced_engine("high_claimants", "1.0", fingerprint_fields=("claimants", "isl_threshold"))
def process_high_claimants(
    claimants: Sequence[HighClaimantInput],
    isl_threshold: Decimal = DEFAULT_ISL_THRESHOLD,
) -> HighClaimantSummary:
    """
    Evaluate claimants against the ISL and summarise the qualifying ones.

    Claimants below 50% of the ISL are dropped from the summary.
    """
    threshold = qualifying_threshold(isl_threshold)
    qualifying = sorted(
        (
            result
            for result in (_evaluate(c, isl_threshold) for c in claimants)
            if result.total_paid >= threshold
        ),
        key=lambda r: r.total_paid,
        reverse=True,
    )

    summary = HighClaimantSummary(
        isl_threshold=isl_threshold,
        qualifying_threshold=threshold,
        claimants=tuple(qualifying),
        total_claimants=len(qualifying),
        total_paid=sum((c.total_paid for c in qualifying), ZERO),
        total_exceeding_isl=sum((c.amount_exceeding_isl for c in qualifying), ZERO),
        employer_total=sum((c.employer_share for c in qualifying), ZERO),
        stop_loss_total=sum((c.stop_loss_share for c in qualifying), ZERO),
    )

    logger.info("high_claimants_processed", extra={
        "input_count": len(claimants),
        "qualifying_count": summary.total_claimants,
        "isl_threshold": isl_threshold,
        "stop_loss_total": summary.stop_loss_total,
    })
    return summary


def filter_by_isl_threshold(
    claimants: Sequence[HighClaimantResult],
    new_isl_threshold: Decimal,
) -> tuple[HighClaimantResult, ...]:
    """Re-filter already evaluated claimants for a different ISL (UI slider)."""
    threshold = qualifying_threshold(new_isl_threshold)
    return tuple(c for c in claimants if c.total_paid >= threshold)


def calculate_stop_loss_reimbursement_ytd(claimants: Sequence[HighClaimantResult]) -> Decimal:
    return sum((c.stop_loss_share for c in claimants), ZERO)


def generate_high_claimant_observation(
    summary: HighClaimantSummary,
    stop_loss_reimb_ytd: Decimal,
) -> str:
    """Plain-English sentence(s) for the high-claimant page; empty when none qualify."""
    if summary.total_claimants == 0:
        return ""

    plural = "s" if summary.total_claimants > 1 else ""
    observations = [
        f"{summary.total_claimants} high-cost claimant{plural} with total claims of "
        f"{format_currency(summary.total_paid)} exceed 50% of the ISL."
    ]
    if summary.total_exceeding_isl > 0:
        observations.append(
            f"Stop Loss recognized {format_currency(stop_loss_reimb_ytd)} "
            f"in reimbursements year-to-date."
        )
    return " ".join(observations)


def group_claimants_by_plan(
    claimants: Sequence[HighClaimantResult],
) -> dict[str, list[HighClaimantResult]]:
    """Group by plan name, keeping first-seen plan order."""
    grouped: dict[str, list[HighClaimantResult]] = {}
    for claimant in claimants:
        grouped.setdefault(claimant.plan_name, []).append(claimant)
    return grouped


def calculate_status_distribution(claimants: Sequence[HighClaimantResult]) -> StatusDistribution:
    counts = {status: 0 for status in ClaimantStatus}
    for claimant in claimants:
        if claimant.status in counts:
            counts[claimant.status] += 1
    return StatusDistribution(
        active=counts[ClaimantStatus.ACTIVE],
        resolved=counts[ClaimantStatus.RESOLVED],
        pending=counts[ClaimantStatus.PENDING],
    )
