"""
Pytest fixtures for the claims reporting test suite.

Provides:
- Structured logging configured for every test, with a capture fixture
- A three-month plan year (January-March 2025) with its monthly budget
  overlays and an annual admin fee
- Budget policies for both rounding modes
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from claims_kernel.domain.values import (
    AppliesTo,
    BudgetConfig,
    FeeWindow,
    MonthlyActuals,
    MonthlyConfig,
    RoundingMode,
    UnitType,
)
from claims_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture claims_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            calculate_monthly_stats(...)
            logs = captured_logs()
            assert any(r["message"] == "monthly_stats_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("claims_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Plan year fixtures
# =============================================================================


def _actuals(
    month: date,
    domestic: str,
    non_domestic: str,
    non_hospital: str,
    rx: str,
    ee_count: int,
    member_count: int,
) -> MonthlyActuals:
    return MonthlyActuals(
        service_month=month,
        domestic_facility_ip_op=Decimal(domestic),
        non_domestic_ip_op=Decimal(non_domestic),
        non_hospital_medical=Decimal(non_hospital),
        rx_claims=Decimal(rx),
        ee_count=ee_count,
        member_count=member_count,
    )


@pytest.fixture
def make_actuals():
    """Factory for MonthlyActuals from string amounts."""
    return _actuals


@pytest.fixture
def q1_actuals() -> list[MonthlyActuals]:
    """January-March 2025 claims and enrollment."""
    return [
        _actuals(date(2025, 1, 1), "50000", "10000", "30000", "20000", 100, 250),
        _actuals(date(2025, 2, 1), "55000", "12000", "32000", "21000", 102, 255),
        _actuals(date(2025, 3, 1), "48000", "11000", "31000", "19000", 101, 252),
    ]


@pytest.fixture
def q1_configs() -> list[MonthlyConfig]:
    """Expected claims for January-March 2025; no adjustments."""
    return [
        MonthlyConfig(service_month=date(2025, 1, 1), expected_claims=Decimal("105000")),
        MonthlyConfig(service_month=date(2025, 2, 1), expected_claims=Decimal("110000")),
        MonthlyConfig(service_month=date(2025, 3, 1), expected_claims=Decimal("107000")),
    ]


@pytest.fixture
def admin_fee() -> FeeWindow:
    """$120,000 a year, i.e. $10,000 a month, for calendar 2025."""
    return FeeWindow(
        fee_name="Admin Fee",
        unit_type=UnitType.ANNUAL,
        rate=Decimal("120000"),
        applies_to=AppliesTo.FIXED,
        effective_start=date(2025, 1, 1),
        effective_end=date(2025, 12, 31),
    )


@pytest.fixture
def half_up_config() -> BudgetConfig:
    return BudgetConfig(rounding_mode=RoundingMode.HALF_UP, currency_precision=2)


@pytest.fixture
def banker_config() -> BudgetConfig:
    return BudgetConfig(rounding_mode=RoundingMode.BANKER, currency_precision=2)
