"""
Typed Exception Hierarchy for the Claims Reporting Kernel.

===============================================================================
WHERE ERRORS COME FROM
===============================================================================

The calculation engines do NOT raise for financial edge cases. Zero
denominators, missing monthly configs and fees outside their effective
window all degrade to zero contributions. Partial configuration is the
normal state of a plan year, not an exceptional one.

Errors are raised at the boundaries instead:
  1. Configuration loading (YAML plan-year files, budget policy)
  2. Row coercion in the caller layer (strings -> Decimal, ISO -> date)
  3. Plan-year lookups ("no actuals uploaded yet")

Every error has a TYPED class, a class-level CODE, and structured DATA:

    try:
        summary = service.calculate(plan_year_id, actuals, configs, fees)
    except NoActualsFoundError as e:
        return {"error": e.code, "plan_year_id": e.plan_year_id}, 404
    except InputError as e:
        return {"error": e.code, "field": e.field}, 422

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ClaimsReportingError (base)
    |
    +-- ConfigurationError
    |   +-- InvalidBudgetConfigError
    |   +-- ConfigFileError
    |
    +-- InputError
    |   +-- InvalidAmountError
    |   +-- InvalidCountError
    |   +-- InvalidServiceMonthError
    |   +-- InvalidFeeWindowError
    |
    +-- PlanYearError
        +-- NoActualsFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_BUDGET_CONFIG       | Unknown enum value, precision out of range
                | CONFIG_FILE_ERROR           | YAML missing keys or wrong shape
----------------|-----------------------------|-----------------------------------------
Input           | INVALID_AMOUNT              | Non-numeric or negative monetary value
                | INVALID_COUNT               | Employee/member count not a positive int
                | INVALID_SERVICE_MONTH       | Unparseable date
                | INVALID_FEE_WINDOW          | effective_end before effective_start
----------------|-----------------------------|-----------------------------------------
Plan year       | NO_ACTUALS_FOUND            | Plan year has no uploaded actuals
"""


class ClaimsReportingError(Exception):
    """
    Base exception for all claims reporting errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CLAIMS_REPORTING_ERROR"


# Configuration exceptions


class ConfigurationError(ClaimsReportingError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidBudgetConfigError(ConfigurationError):
    """Budget policy field has an unsupported value."""

    code: str = "INVALID_BUDGET_CONFIG"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid budget config {field}={value!r}: {reason}")


class ConfigFileError(ConfigurationError):
    """Plan-year configuration file is missing keys or malformed."""

    code: str = "CONFIG_FILE_ERROR"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Configuration error in {source}: {reason}")


# Input coercion exceptions


class InputError(ClaimsReportingError):
    """Base exception for rows that cannot be coerced into domain records."""

    code: str = "INPUT_ERROR"


class InvalidAmountError(InputError):
    """Monetary field is not a valid non-negative decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: object, reason: str = "not a valid decimal"):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid amount for {field}: {value!r} ({reason})")


class InvalidCountError(InputError):
    """Enrollment count is not a positive integer."""

    code: str = "INVALID_COUNT"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Invalid count for {field}: {value!r} (must be a positive integer)")


class InvalidServiceMonthError(InputError):
    """Date field cannot be parsed."""

    code: str = "INVALID_SERVICE_MONTH"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Invalid date for {field}: {value!r}")


class InvalidFeeWindowError(InputError):
    """Fee window effective range is inverted."""

    code: str = "INVALID_FEE_WINDOW"

    def __init__(self, fee_name: str, effective_start: str, effective_end: str):
        self.fee_name = fee_name
        self.effective_start = effective_start
        self.effective_end = effective_end
        super().__init__(
            f"Fee window {fee_name!r} ends ({effective_end}) "
            f"before it starts ({effective_start})"
        )


# Plan-year exceptions


class PlanYearError(ClaimsReportingError):
    """Base exception for plan-year level errors."""

    code: str = "PLAN_YEAR_ERROR"


class NoActualsFoundError(PlanYearError):
    """No monthly actuals have been supplied for the plan year."""

    code: str = "NO_ACTUALS_FOUND"

    def __init__(self, plan_year_id: str):
        self.plan_year_id = plan_year_id
        super().__init__(
            f"No actuals data found for plan year {plan_year_id}. "
            f"Please upload data first."
        )
