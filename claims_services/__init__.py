"""
claims_services -- Package init and public API.

Responsibility:
    Caller-facing orchestration: coerce raw rows into domain records,
    resolve the budget policy, run the engines, and serialise results.
    This is the only layer that touches configuration files.

Architecture position:
    Services -- orchestration over engines + config + kernel.

    Dependency direction (enforced by tests/architecture/test_import_boundaries.py):
        claims_services/ -> claims_config/, claims_engines/, claims_kernel/  (allowed)
        claims_engines/  -> claims_services/, claims_config/                 (FORBIDDEN)
        claims_kernel/   -> anything above it                                (FORBIDDEN)
"""

from claims_kernel.logging_config import get_logger

logger = get_logger("services")

from claims_services.budget_calculation import BudgetCalculationService
from claims_services.coercion import (
    coerce_actuals_row,
    coerce_budget_config_row,
    coerce_config_row,
    coerce_fee_window_row,
)
from claims_services.serialization import summary_to_dict, summary_to_json

__all__ = [
    "BudgetCalculationService",
    "coerce_actuals_row",
    "coerce_budget_config_row",
    "coerce_config_row",
    "coerce_fee_window_row",
    "summary_to_dict",
    "summary_to_json",
]
