"""
claims_engines.rounding -- Configurable currency rounding.

Responsibility:
    Apply the plan year's rounding policy (half-up or banker's) at the
    configured decimal precision to every value that leaves an engine.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Decimal quantize only; no float scaling, so exact halves stay exact.
    - HALF_UP rounds half away from zero; BANKER rounds half to even.
    - Percent values are always rounded at PERCENT_PRECISION regardless of
      the configured currency precision.
    - Idempotent: rounding an already-rounded value is a no-op.

Usage:
    from claims_engines.rounding import RoundingPolicy

    policy = RoundingPolicy.from_config(budget_config)
    policy.money(Decimal("10.005"))    # Decimal("10.01") under HALF_UP
    policy.percent(Decimal("4.3478"))  # Decimal("4.35")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal

from claims_kernel.domain.values import BudgetConfig, RoundingMode

PERCENT_PRECISION = 2

_DECIMAL_ROUNDING = {
    RoundingMode.HALF_UP: ROUND_HALF_UP,
    RoundingMode.BANKER: ROUND_HALF_EVEN,
}


def _quantum(precision: int) -> Decimal:
    return Decimal(1).scaleb(-precision)


def apply_rounding(
    value: Decimal | int,
    mode: RoundingMode | str,
    precision: int,
) -> Decimal:
    """
    Round ``value`` to ``precision`` decimal places under ``mode``.

    Unknown modes fall back to HALF_UP.
    """
    try:
        mode = RoundingMode(mode)
    except ValueError:
        mode = RoundingMode.HALF_UP
    return Decimal(value).quantize(_quantum(precision), rounding=_DECIMAL_ROUNDING[mode])


def round_percent(value: Decimal | int, mode: RoundingMode | str) -> Decimal:
    """Round a percent value at the fixed two-decimal precision."""
    return apply_rounding(value, mode, PERCENT_PRECISION)


@dataclass(frozen=True)
class RoundingPolicy:
    """Rounding mode and currency precision bound together."""

    mode: RoundingMode = RoundingMode.HALF_UP
    precision: int = 2

    @classmethod
    def from_config(cls, config: BudgetConfig) -> RoundingPolicy:
        return cls(mode=config.rounding_mode, precision=config.currency_precision)

    def money(self, value: Decimal | int) -> Decimal:
        return apply_rounding(value, self.mode, self.precision)

    def percent(self, value: Decimal | int) -> Decimal:
        return round_percent(value, self.mode)
