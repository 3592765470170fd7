from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum


class PaymentFrequency(Enum):
    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"


class LoanType(Enum):
    AMORTIZED = "amortized"
    SIMPLE_INTEREST = "simple_interest"  # Daily simple interest between payment dates
    BLENDED = "blended"  # Amortized until blend_switch_payment, then daily simple interest


class DayCountConvention(Enum):
    THIRTY_360 = "30/360"
    ACTUAL_360 = "actual/360"
    ACTUAL_365 = "actual/365"
    ACTUAL_ACTUAL = "actual/actual"


class PrepaymentType(Enum):
    REDUCE_TERM = "reduce_term"
    REDUCE_PAYMENT = "reduce_payment"


@dataclass(frozen=True)
class Balloon:
    """Lump sum that retires the loan at payment_number.

    With an amount, the level payment is solved so the balance left after the
    regular installment of payment_number equals amount. Without one, the loan
    amortizes over its full term and whatever remains is due at payment_number.
    """
    payment_number: int
    amount: Decimal | None = None


@dataclass(frozen=True)
class LoanTerms:
    principal: Decimal
    annual_rate: Decimal  # Percent per year, e.g. Decimal("4.5")
    term_months: int
    start_date: date
    first_payment_date: date | None = None  # Defaults to one period after start_date
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    loan_type: LoanType = LoanType.AMORTIZED
    balloon: Balloon | None = None
    day_count_convention: DayCountConvention | None = None  # None = settings default
    blend_switch_payment: int | None = None  # Blended loans only
    payment_day: int | None = None  # Monthly due day; 31 means month-end. Resolved during validation

    def with_changes(self, **changes) -> "LoanTerms":
        """Return a modified copy. LoanTerms are never mutated in place."""
        return replace(self, **changes)
