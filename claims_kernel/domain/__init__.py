"""
Pure domain layer.

Immutable records and enums shared by every other layer, with NO
dependencies on:
- Persistence
- Time/clock
- I/O
"""

from claims_kernel.domain.values import (
    DEFAULT_BUDGET_CONFIG,
    PRORATED_UNITS,
    ZERO,
    AppliesTo,
    BudgetConfig,
    ClaimsModelType,
    FeeWindow,
    MonthlyActuals,
    MonthlyConfig,
    PctClaimsBase,
    RoundingMode,
    UnitType,
    month_start,
)

__all__ = [
    "DEFAULT_BUDGET_CONFIG",
    "PRORATED_UNITS",
    "ZERO",
    "AppliesTo",
    "BudgetConfig",
    "ClaimsModelType",
    "FeeWindow",
    "MonthlyActuals",
    "MonthlyConfig",
    "PctClaimsBase",
    "RoundingMode",
    "UnitType",
    "month_start",
]
