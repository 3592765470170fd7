from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class PaymentCalculation:
    payment_amount: Decimal
    total_interest: Decimal


@dataclass(frozen=True)
class AmortizationScheduleEntry:
    payment_number: int
    payment_date: date
    scheduled_payment: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    total_payment: Decimal
    beginning_balance: Decimal
    remaining_balance: Decimal
    cumulative_interest: Decimal
    cumulative_principal: Decimal
    balloon_payment: Decimal | None = None


@dataclass(frozen=True)
class PaymentSchedule:
    """Derived from LoanTerms. Regenerate it, never edit it."""
    entries: list[AmortizationScheduleEntry]
    total_payments: Decimal
    total_interest: Decimal
    total_principal: Decimal
    monthly_payment: Decimal  # Level installment per period, whatever the frequency
    first_payment_date: date
    last_payment_date: date
    term_months: int

    @property
    def number_of_payments(self) -> int:
        return len(self.entries)

    @property
    def final_entry(self) -> AmortizationScheduleEntry:
        return self.entries[-1]


@dataclass(frozen=True)
class LoanState:
    """Everything the calculation cache stores for one loan fingerprint."""
    payment: PaymentCalculation
    schedule: PaymentSchedule
    annual_percentage_rate: Decimal
