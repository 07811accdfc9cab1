"""
Values -- Immutable domain records for budget-vs-actuals reporting.

Responsibility:
    Defines the plain records the calculation engines consume: one month of
    claims actuals, the optional monthly budget overlay, fee schedule
    windows, and the engine-wide budget policy.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
    Imported by engines, config and services. No outward dependencies.

Invariants enforced:
    - All monetary fields are Decimal (never float).
    - Records are frozen; engines build new output records and never mutate
      caller-owned inputs.
    - BudgetConfig enum fields are normalised to their Enum members on
      construction; precision is limited to 0..2 decimal places.

Failure modes:
    - InvalidBudgetConfigError on an unknown policy value or a precision /
      horizon outside the supported range.

Audit relevance:
    The monthly actuals and the fee schedule are the complete input set for
    a plan year's variance report; keeping them immutable makes each
    report reproducible from its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from claims_kernel.exceptions import InvalidBudgetConfigError

ZERO = Decimal("0")


class UnitType(str, Enum):
    """How a fee window's rate turns into a monthly amount."""

    ANNUAL = "ANNUAL"  # rate / 12, prorated by days
    MONTHLY = "MONTHLY"  # prorated by days
    FLAT = "FLAT"  # prorated by days
    PEPM = "PEPM"  # rate x member count
    PEPEM = "PEPEM"  # rate x employee count
    PERCENT_OF_CLAIMS = "PERCENT_OF_CLAIMS"


PRORATED_UNITS: frozenset[UnitType] = frozenset(
    {UnitType.ANNUAL, UnitType.MONTHLY, UnitType.FLAT}
)


class AppliesTo(str, Enum):
    """Cost bucket a fee contributes to."""

    FIXED = "FIXED"
    CLAIMS = "CLAIMS"
    RX = "RX"
    ADMIN = "ADMIN"
    STOP_LOSS = "STOP_LOSS"
    OTHER = "OTHER"


class ClaimsModelType(str, Enum):
    """Claims modelling mode. Only DIRECT is computed; DERIVED is reserved."""

    DIRECT = "DIRECT"
    DERIVED = "DERIVED"


class PctClaimsBase(str, Enum):
    """Claims figure that PERCENT_OF_CLAIMS fees multiply against."""

    ACTUAL = "ACTUAL"
    EXPECTED = "EXPECTED"


class RoundingMode(str, Enum):
    """Currency rounding policy."""

    HALF_UP = "HALF_UP"
    BANKER = "BANKER"  # round half to even


MIN_CURRENCY_PRECISION = 0
MAX_CURRENCY_PRECISION = 2


def month_start(value: date | datetime) -> date:
    """Normalise a date or datetime to the first day of its month."""
    if isinstance(value, datetime):
        value = value.date()
    return value.replace(day=1)


@dataclass(frozen=True)
class MonthlyActuals:
    """
    One calendar month of raw claims and enrollment for a plan year.

    Contract:
        ``service_month`` is the unique key within a plan year. The four
        claims categories are non-negative Decimals.
    Non-goals:
        Does not validate amounts; the caller's coercion step does that.
    """

    service_month: date
    domestic_facility_ip_op: Decimal
    non_domestic_ip_op: Decimal
    non_hospital_medical: Decimal
    rx_claims: Decimal
    ee_count: int
    member_count: int

    @property
    def total_claims(self) -> Decimal:
        """Sum of the four claims categories."""
        return (
            self.domestic_facility_ip_op
            + self.non_domestic_ip_op
            + self.non_hospital_medical
            + self.rx_claims
        )


@dataclass(frozen=True)
class MonthlyConfig:
    """Optional per-month budget and adjustment overlay."""

    service_month: date
    expected_claims: Decimal = ZERO
    stop_loss_reimb: Decimal = ZERO
    rx_rebates: Decimal = ZERO


@dataclass(frozen=True)
class FeeWindow:
    """
    A fee schedule entry with an inclusive effective date range.

    ``unit_type`` is normally a ``UnitType`` but may hold an unrecognised
    string; engines treat those as contributing nothing.
    """

    fee_name: str
    unit_type: UnitType | str
    rate: Decimal
    applies_to: AppliesTo | str
    effective_start: date
    effective_end: date

    @property
    def is_fixed(self) -> bool:
        return self.applies_to == AppliesTo.FIXED


def _coerce_enum(enum_cls: type[Enum], field: str, value: object) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidBudgetConfigError(field, value, f"expected one of {allowed}") from None


@dataclass(frozen=True)
class BudgetConfig:
    """
    Engine-wide budget policy.

    Contract:
        Enum fields accept either Enum members or their string values.
    Guarantees:
        - After construction all enum fields are Enum members.
        - ``currency_precision`` is within 0..2.
        - ``default_horizon_months`` is positive. It is informational only;
          the calculator never reads it.
    """

    claims_model_type: ClaimsModelType = ClaimsModelType.DIRECT
    pct_claims_base: PctClaimsBase = PctClaimsBase.ACTUAL
    rounding_mode: RoundingMode = RoundingMode.HALF_UP
    currency_precision: int = 2
    default_horizon_months: int = 12

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "claims_model_type",
            _coerce_enum(ClaimsModelType, "claims_model_type", self.claims_model_type),
        )
        object.__setattr__(
            self,
            "pct_claims_base",
            _coerce_enum(PctClaimsBase, "pct_claims_base", self.pct_claims_base),
        )
        object.__setattr__(
            self,
            "rounding_mode",
            _coerce_enum(RoundingMode, "rounding_mode", self.rounding_mode),
        )

        if isinstance(self.currency_precision, bool) or not isinstance(self.currency_precision, int):
            raise InvalidBudgetConfigError(
                "currency_precision", self.currency_precision, "must be an integer"
            )
        if not MIN_CURRENCY_PRECISION <= self.currency_precision <= MAX_CURRENCY_PRECISION:
            raise InvalidBudgetConfigError(
                "currency_precision",
                self.currency_precision,
                f"must be between {MIN_CURRENCY_PRECISION} and {MAX_CURRENCY_PRECISION}",
            )
        if isinstance(self.default_horizon_months, bool) or not isinstance(self.default_horizon_months, int) \
                or self.default_horizon_months <= 0:
            raise InvalidBudgetConfigError(
                "default_horizon_months", self.default_horizon_months, "must be a positive integer"
            )


DEFAULT_BUDGET_CONFIG = BudgetConfig()
