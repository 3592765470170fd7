from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from lendcalc.models.loan import PrepaymentType


@dataclass(frozen=True)
class PrepaymentResult:
    prepayment_amount: Decimal
    prepayment_date: date | None
    prepayment_type: PrepaymentType

    original_term: int
    new_term: int
    term_reduction: int

    original_payment: Decimal
    new_payment: Decimal
    payment_reduction: Decimal

    original_total_interest: Decimal
    new_total_interest: Decimal
    interest_savings: Decimal
