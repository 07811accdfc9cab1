"""
Plan-year configuration loader (``claims_config.loader``).

Responsibility
--------------
Loads a plan year's YAML file (budget policy, monthly budget overlays and
fee schedule) and parses it into the frozen domain records the engines
consume.

Architecture position
---------------------
**Config layer**.  Depends on ``claims_kernel`` only; consumed by
``claims_config`` (the package entrypoint) and ``claims_services``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``claims_kernel.domain``.
* Amounts are parsed from their string form, so a YAML ``0.05`` becomes
  ``Decimal("0.05")`` rather than the nearest binary float.
* ``compute_checksum`` produces a deterministic SHA-256 hash for change
  detection.

Failure modes
-------------
* Missing or unreadable file, malformed YAML, missing required keys,
  blank fee name
  -> ``ConfigFileError``.
* Bad or negative amount -> ``InvalidAmountError``; bad date -> ``InvalidServiceMonthError``;
  inverted fee window -> ``InvalidFeeWindowError``.
* Bad budget policy value -> ``InvalidBudgetConfigError``.

Expected file shape
-------------------
::

    plan_year_id: PY2025
    budget:
      claims_model_type: DIRECT
      pct_claims_base: ACTUAL
      rounding_mode: HALF_UP
      currency_precision: 2
    monthly_configs:
      - service_month: 2025-01-01
        expected_claims: 105000
    fee_windows:
      - fee_name: Admin Fee
        unit_type: ANNUAL
        rate: 120000
        applies_to: FIXED
        effective_start: 2025-01-01
        effective_end: 2025-12-31
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from claims_kernel.domain.values import (
    ZERO,
    AppliesTo,
    BudgetConfig,
    FeeWindow,
    MonthlyConfig,
    UnitType,
)
from claims_kernel.exceptions import (
    ConfigFileError,
    InvalidAmountError,
    InvalidFeeWindowError,
    InvalidServiceMonthError,
)
from claims_kernel.logging_config import get_logger

logger = get_logger("config.loader")

BUDGET_CONFIG_KEYS = (
    "claims_model_type",
    "pct_claims_base",
    "rounding_mode",
    "currency_precision",
    "default_horizon_months",
)


@dataclass(frozen=True)
class PlanYearConfig:
    """Everything a plan year contributes besides its monthly actuals."""

    plan_year_id: str
    budget_config: BudgetConfig
    monthly_configs: tuple[MonthlyConfig, ...] = ()
    fee_windows: tuple[FeeWindow, ...] = ()
    checksum: str = field(default="", compare=False)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        ConfigFileError: if the file is missing, unreadable, not valid
            YAML, or not a mapping at the top level.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigFileError(str(path), f"cannot read file: {exc.strerror or exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigFileError(str(path), f"invalid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(str(path), "top level must be a mapping")
    return data


def _require(data: dict[str, Any], key: str, source: str) -> Any:
    if key not in data or data[key] is None:
        raise ConfigFileError(source, f"missing required key {key!r}")
    return data[key]


def parse_date(field_name: str, value: Any) -> date:
    """Parse a date from YAML (a date object or an ISO-format string)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 7:  # YYYY-MM
            text += "-01"
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise InvalidServiceMonthError(field_name, value) from None
    raise InvalidServiceMonthError(field_name, value)


def parse_decimal(field_name: str, value: Any) -> Decimal:
    """
    Parse a monetary value.

    Strings, ints, floats and Decimals are accepted; floats go through
    ``str`` first.  Thousands separators and a leading ``$`` are tolerated.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(field_name, value)
    if isinstance(value, Decimal):
        result = value
    else:
        text = str(value).strip().replace(",", "").removeprefix("$")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise InvalidAmountError(field_name, value) from None
    if not result.is_finite():
        raise InvalidAmountError(field_name, value, "must be finite")
    return result


def parse_non_negative_decimal(field_name: str, value: Any) -> Decimal:
    """``parse_decimal`` that also rejects amounts below zero."""
    amount = parse_decimal(field_name, value)
    if amount < 0:
        raise InvalidAmountError(field_name, value, "must be non-negative")
    return amount


def parse_budget_config(data: dict[str, Any] | None) -> BudgetConfig:
    """
    Parse a ``BudgetConfig``; absent keys take the engine defaults.

    Unknown keys are ignored with a warning.
    """
    data = data or {}
    unknown = sorted(set(data) - set(BUDGET_CONFIG_KEYS))
    if unknown:
        logger.warning("budget_config_unknown_keys", extra={"keys": unknown})
    return BudgetConfig(**{k: data[k] for k in BUDGET_CONFIG_KEYS if data.get(k) is not None})


def parse_monthly_config(data: dict[str, Any], source: str = "monthly_configs") -> MonthlyConfig:
    """Parse one monthly budget overlay; only ``service_month`` is required."""

    def amount(key: str) -> Decimal:
        value = data.get(key)
        return ZERO if value is None else parse_non_negative_decimal(key, value)

    return MonthlyConfig(
        service_month=parse_date("service_month", _require(data, "service_month", source)),
        expected_claims=amount("expected_claims"),
        stop_loss_reimb=amount("stop_loss_reimb"),
        rx_rebates=amount("rx_rebates"),
    )


def _parse_enum(enum_cls: type, value: Any) -> Any:
    """Enum member for ``value`` when recognised, else the raw string."""
    text = str(value).strip().upper()
    try:
        return enum_cls(text)
    except ValueError:
        return text


def parse_fee_window(data: dict[str, Any], source: str = "fee_windows") -> FeeWindow:
    """
    Parse one fee schedule window.

    Unrecognised unit types are kept as strings; the engines treat them as
    contributing nothing.
    """
    fee_name = str(_require(data, "fee_name", source)).strip()
    if not fee_name:
        raise ConfigFileError(source, "fee_name must not be blank")
    effective_start = parse_date("effective_start", _require(data, "effective_start", source))
    effective_end = parse_date("effective_end", _require(data, "effective_end", source))
    if effective_end < effective_start:
        raise InvalidFeeWindowError(fee_name, effective_start.isoformat(), effective_end.isoformat())

    return FeeWindow(
        fee_name=fee_name,
        unit_type=_parse_enum(UnitType, _require(data, "unit_type", source)),
        rate=parse_non_negative_decimal("rate", _require(data, "rate", source)),
        applies_to=_parse_enum(AppliesTo, _require(data, "applies_to", source)),
        effective_start=effective_start,
        effective_end=effective_end,
    )


def _parse_list(data: dict[str, Any], key: str, source: str) -> list[dict[str, Any]]:
    items = data.get(key) or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ConfigFileError(source, f"{key!r} must be a list of mappings")
    return items


def parse_plan_year_config(data: dict[str, Any], source: str = "<dict>") -> PlanYearConfig:
    """Parse an already-loaded plan-year document."""
    plan_year_id = str(_require(data, "plan_year_id", source))
    budget = data.get("budget")
    if budget is not None and not isinstance(budget, dict):
        raise ConfigFileError(source, "'budget' must be a mapping")

    return PlanYearConfig(
        plan_year_id=plan_year_id,
        budget_config=parse_budget_config(budget),
        monthly_configs=tuple(
            parse_monthly_config(item, f"{source}:monthly_configs[{i}]")
            for i, item in enumerate(_parse_list(data, "monthly_configs", source))
        ),
        fee_windows=tuple(
            parse_fee_window(item, f"{source}:fee_windows[{i}]")
            for i, item in enumerate(_parse_list(data, "fee_windows", source))
        ),
        checksum=compute_checksum(data),
    )


def load_plan_year_config(path: Path | str) -> PlanYearConfig:
    """
    Load and parse a plan-year YAML file.

    Postconditions:
        - ``checksum`` is the SHA-256 of the file's parsed contents.
    """
    path = Path(path)
    config = parse_plan_year_config(load_yaml_file(path), source=str(path))

    logger.info("plan_year_config_loaded", extra={
        "plan_year_id": config.plan_year_id,
        "source": str(path),
        "monthly_config_count": len(config.monthly_configs),
        "fee_window_count": len(config.fee_windows),
        "checksum": config.checksum,
    })
    return config


def budget_config_to_dict(config: BudgetConfig) -> dict[str, Any]:
    return {k: (v.value if hasattr(v, "value") else v) for k, v in asdict(config).items()}


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
