"""
claims_config -- budget policy and plan-year configuration.

Responsibility:
    Provides the default budget policy shipped with the package and the
    loader for plan-year YAML files.  Callers obtain a ``BudgetConfig``
    through ``get_budget_config()`` rather than constructing one from raw
    settings.

Architecture position:
    Configuration -- sits above ``claims_kernel`` and below
    ``claims_services``.  Engines MUST NOT import from ``claims_config``;
    they receive a ``BudgetConfig`` as an argument.

Invariants enforced:
    - Overrides are validated by ``BudgetConfig`` itself; an invalid value
      never reaches an engine.
    - Same inputs always produce the same checksum.

Failure modes:
    - ``ConfigFileError`` -- defaults file missing or malformed.
    - ``InvalidBudgetConfigError`` -- an override has an unsupported value.

Audit relevance:
    Every ``get_budget_config()`` call emits a ``CLAIMS_CONFIG_TRACE`` log
    entry with the effective policy and its checksum, tying each report to
    the policy that rounded it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from claims_config.loader import (
    PlanYearConfig,
    budget_config_to_dict,
    compute_checksum,
    load_plan_year_config,
    load_yaml_file,
    parse_budget_config,
    parse_date,
    parse_decimal,
    parse_fee_window,
    parse_monthly_config,
    parse_non_negative_decimal,
    parse_plan_year_config,
)
from claims_kernel.domain.values import BudgetConfig
from claims_kernel.exceptions import ConfigFileError
from claims_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def default_budget_config(defaults_path: Path | None = None) -> BudgetConfig:
    """The packaged default budget policy."""
    path = defaults_path or DEFAULTS_PATH
    data = load_yaml_file(path)
    if "budget" not in data:
        raise ConfigFileError(str(path), "missing required key 'budget'")
    return parse_budget_config(data["budget"])


def get_budget_config(
    overrides: dict[str, Any] | None = None,
    defaults_path: Path | None = None,
) -> BudgetConfig:
    """
    The effective budget policy: packaged defaults with ``overrides`` applied.

    Args:
        overrides: Policy fields to replace, e.g. ``{"rounding_mode": "BANKER"}``.
            ``None`` values are ignored.
        defaults_path: Alternative defaults file (tests).
    """
    merged = budget_config_to_dict(default_budget_config(defaults_path))
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
    config = parse_budget_config(merged)

    _logger.info(
        "CLAIMS_CONFIG_TRACE",
        extra={
            "trace_type": "CLAIMS_CONFIG_TRACE",
            "claims_model_type": config.claims_model_type,
            "pct_claims_base": config.pct_claims_base,
            "rounding_mode": config.rounding_mode,
            "currency_precision": config.currency_precision,
            "checksum": compute_checksum(budget_config_to_dict(config)),
        },
    )
    return config


__all__ = [
    "DEFAULTS_PATH",
    "PlanYearConfig",
    "compute_checksum",
    "default_budget_config",
    "get_budget_config",
    "load_plan_year_config",
    "load_yaml_file",
    "parse_budget_config",
    "parse_date",
    "parse_decimal",
    "parse_fee_window",
    "parse_monthly_config",
    "parse_non_negative_decimal",
    "parse_plan_year_config",
]
