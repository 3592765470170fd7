"""Canonical loan fixtures used across engine and cache tests.

Fixture: $200K fixed-rate loan, 4.5% for 15 years, monthly, starting 2024-01-01.
"""

import pytest
from datetime import date
from decimal import Decimal

from lendcalc.models.loan import Balloon, DayCountConvention, LoanTerms, LoanType


@pytest.fixture
def canonical_terms() -> LoanTerms:
    """$200K at 4.5% over 180 months."""
    return LoanTerms(
        principal=Decimal("200000.00"),
        annual_rate=Decimal("4.5"),
        term_months=180,
        start_date=date(2024, 1, 1),
    )


@pytest.fixture
def small_loan_terms() -> LoanTerms:
    """$10K at 6% over 36 months. Monthly rate is exactly 0.005."""
    return LoanTerms(
        principal=Decimal("10000.00"),
        annual_rate=Decimal("6.0"),
        term_months=36,
        start_date=date(2024, 1, 1),
    )


@pytest.fixture
def zero_rate_terms() -> LoanTerms:
    return LoanTerms(
        principal=Decimal("12000.00"),
        annual_rate=Decimal("0"),
        term_months=12,
        start_date=date(2024, 1, 1),
    )


@pytest.fixture
def balloon_terms() -> LoanTerms:
    """$100K at 6%, 60 payments, $50K balloon due with payment 60."""
    return LoanTerms(
        principal=Decimal("100000.00"),
        annual_rate=Decimal("6.0"),
        term_months=60,
        start_date=date(2024, 1, 1),
        balloon=Balloon(payment_number=60, amount=Decimal("50000")),
    )


@pytest.fixture
def simple_interest_terms() -> LoanTerms:
    """$10K daily simple interest loan, actual/365."""
    return LoanTerms(
        principal=Decimal("10000.00"),
        annual_rate=Decimal("6.0"),
        term_months=12,
        start_date=date(2024, 1, 1),
        loan_type=LoanType.SIMPLE_INTEREST,
        day_count_convention=DayCountConvention.ACTUAL_365,
    )
