"""Interest accrual by day count, per diem and payoff quotes.

Pure functions: Decimal in, Decimal out. No I/O.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from lendcalc.engine.dates import periods_per_year, year_basis, year_fraction
from lendcalc.engine.precision import Amount, round_currency, round_percentage, to_decimal
from lendcalc.models.loan import DayCountConvention, PaymentFrequency

HUNDRED = Decimal("100")


def periodic_rate(annual_rate: Amount, frequency: PaymentFrequency = PaymentFrequency.MONTHLY) -> Decimal:
    """Per-period rate as a fraction: annual percent / periods per year / 100."""
    rate = to_decimal(annual_rate, "annual_rate")
    return rate / periods_per_year(frequency) / HUNDRED


def accrued_interest(
    balance: Amount,
    annual_rate: Amount,
    start: date,
    end: date,
    convention: DayCountConvention,
) -> Decimal:
    """Simple interest on balance from start (exclusive) to end (inclusive)."""
    principal = to_decimal(balance, "balance")
    rate = to_decimal(annual_rate, "annual_rate")
    if end <= start:
        return round_currency(0)
    return round_currency(principal * rate / HUNDRED * year_fraction(start, end, convention))


def per_diem(balance: Amount, annual_rate: Amount, convention: DayCountConvention, year: int) -> Decimal:
    """One day of interest on balance, rounded to the cent."""
    principal = to_decimal(balance, "balance")
    rate = to_decimal(annual_rate, "annual_rate")
    return round_currency(principal * rate / HUNDRED / year_basis(convention, year))


@dataclass(frozen=True)
class PayoffQuote:
    payoff_date: date
    principal: Decimal
    accrued_interest: Decimal
    per_diem: Decimal
    total: Decimal


def payoff_quote(
    balance: Amount,
    annual_rate: Amount,
    interest_paid_through: date,
    payoff_date: date,
    convention: DayCountConvention,
) -> PayoffQuote:
    """Amount that retires the loan on payoff_date."""
    principal = round_currency(to_decimal(balance, "balance"))
    interest = accrued_interest(principal, annual_rate, interest_paid_through, payoff_date, convention)
    return PayoffQuote(
        payoff_date=payoff_date,
        principal=principal,
        accrued_interest=interest,
        per_diem=per_diem(principal, annual_rate, convention, payoff_date.year),
        total=principal + interest,
    )


def effective_annual_rate(nominal_rate: Amount, frequency: PaymentFrequency = PaymentFrequency.MONTHLY) -> Decimal:
    """Effective annual rate (percent) of a nominal rate compounded once per period."""
    m = periods_per_year(frequency)
    rate = to_decimal(nominal_rate, "nominal_rate")
    return round_percentage(((1 + rate / HUNDRED / m) ** m - 1) * HUNDRED)
