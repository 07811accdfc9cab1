"""
claims_engines.pepm_trend -- Per-employee-per-month trend, current vs prior period.

Splits a run of months in half (prior first, current second; an odd month
goes to current) and compares the PEPM of the two halves.

    member_months   = sum of subscribers
    avg_subscribers = member_months / months
    pepm            = sum of metric / avg_subscribers
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from claims_kernel.domain.values import ZERO
from claims_engines.fee_proration import safe_divide


@dataclass(frozen=True)
class PepmMonth:
    month: date
    subscribers: int
    metric: Decimal


@dataclass(frozen=True)
class PepmPeriod:
    total_metric: Decimal = ZERO
    member_months: int = 0
    avg_subscribers: Decimal = ZERO
    pepm: Decimal = ZERO


@dataclass(frozen=True)
class PepmChange:
    absolute: Decimal = ZERO
    percent: Decimal = ZERO  # fraction; 0.1 = +10 %


@dataclass(frozen=True)
class PepmResult:
    current: PepmPeriod
    prior: PepmPeriod
    change: PepmChange


@dataclass(frozen=True)
class CostMonth:
    """One month of the three metrics tracked on the PEPM page."""

    month: date
    subscribers: int
    medical_paid: Decimal
    rx_paid: Decimal
    total_cost: Decimal


@dataclass(frozen=True)
class MultiplePepmResult:
    medical: PepmResult
    rx: PepmResult
    total_cost: PepmResult


def _period_metrics(months: Sequence[PepmMonth]) -> PepmPeriod:
    if not months:
        return PepmPeriod()

    total_metric = sum((m.metric for m in months), ZERO)
    member_months = sum(m.subscribers for m in months)
    avg_subscribers = Decimal(member_months) / len(months)

    return PepmPeriod(
        total_metric=total_metric,
        member_months=member_months,
        avg_subscribers=avg_subscribers,
        pepm=safe_divide(total_metric, avg_subscribers),
    )


def calculate_pepm(months: Sequence[PepmMonth]) -> PepmResult:
    """Compare PEPM of the earlier half of ``months`` with the later half."""
    ordered = sorted(months, key=lambda m: m.month)
    split_point = len(ordered) // 2

    prior = _period_metrics(ordered[:split_point])
    current = _period_metrics(ordered[split_point:])

    change = PepmChange(
        absolute=current.pepm - prior.pepm,
        percent=safe_divide(current.pepm - prior.pepm, prior.pepm),
    )
    return PepmResult(current=current, prior=prior, change=change)


def calculate_multiple_pepm(months: Sequence[CostMonth]) -> MultiplePepmResult:
    """PEPM trend for medical, Rx and total cost over the same months."""

    def series(field: str) -> list[PepmMonth]:
        return [
            PepmMonth(month=m.month, subscribers=m.subscribers, metric=getattr(m, field))
            for m in months
        ]

    return MultiplePepmResult(
        medical=calculate_pepm(series("medical_paid")),
        rx=calculate_pepm(series("rx_paid")),
        total_cost=calculate_pepm(series("total_cost")),
    )


def format_pepm(pepm: Decimal) -> str:
    """Dollar string with cents, e.g. ``$1,234.56``."""
    sign = "-" if pepm < 0 else ""
    return f"{sign}${abs(pepm):,.2f}"
