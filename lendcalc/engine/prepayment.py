"""Term or payment recalculation after an extra principal payment.

Pure functions: Decimal in, dataclass out. No I/O.
"""

import logging
from datetime import date
from decimal import Decimal

from lendcalc.engine.amortization import level_payment, solve_term
from lendcalc.engine.interest import periodic_rate
from lendcalc.engine.precision import Amount, ZERO, round_currency, round_percentage, to_decimal
from lendcalc.engine.validators import coerce_prepayment_type
from lendcalc.errors import InvalidPrepayment
from lendcalc.models.loan import PrepaymentType
from lendcalc.models.prepayment import PrepaymentResult

logger = logging.getLogger(__name__)


def _total_interest(payment: Decimal, term: int, balance: Decimal) -> Decimal:
    return round_currency(payment * term - balance)


def recalculate_prepayment(
    remaining_balance: Amount,
    monthly_payment: Amount,
    annual_rate: Amount,
    remaining_term_months: int,
    prepayment_amount: Amount,
    prepayment_type: PrepaymentType | str,
    prepayment_date: date | None = None,
) -> PrepaymentResult:
    """Effect of paying prepayment_amount of principal now.

    Reduce-term holds the payment and solves the shorter term; the original
    term is solved the same way on the current balance so that a zero
    prepayment changes nothing. Reduce-payment holds remaining_term_months and
    re-levels the payment over the reduced balance.

    Raises:
        InvalidPrepayment: negative amount, amount above the balance, or a
            payment that is not positive.
        UnpayableAtCurrentPayment: reduce-term where the payment does not cover
            the interest on the balance.
    """
    balance = round_currency(to_decimal(remaining_balance, "remaining_balance"))
    payment = round_currency(to_decimal(monthly_payment, "monthly_payment"))
    rate_percent = round_percentage(to_decimal(annual_rate, "annual_rate"))
    amount = round_currency(to_decimal(prepayment_amount, "prepayment_amount"))
    prepayment_type = coerce_prepayment_type(prepayment_type)

    if balance < 0:
        raise InvalidPrepayment(f"remaining_balance cannot be negative, got {balance}")
    if payment <= 0:
        raise InvalidPrepayment(f"monthly_payment must be greater than zero, got {payment}")
    if rate_percent < 0:
        raise InvalidPrepayment(f"annual_rate cannot be negative, got {rate_percent}")
    if isinstance(remaining_term_months, bool) or not isinstance(remaining_term_months, int):
        raise InvalidPrepayment("remaining_term_months must be an integer")
    if remaining_term_months <= 0:
        raise InvalidPrepayment("remaining_term_months must be greater than zero")
    if amount < 0:
        raise InvalidPrepayment(f"prepayment_amount cannot be negative, got {amount}")

    new_balance = balance - amount
    if new_balance < 0:
        raise InvalidPrepayment(f"prepayment {amount} exceeds the remaining balance {balance}")

    rate = periodic_rate(rate_percent)

    if prepayment_type is PrepaymentType.REDUCE_TERM:
        original_term = solve_term(balance, payment, rate)
        if original_term != remaining_term_months:
            logger.warning(
                "Payment %s implies %d remaining payments on %s, not %d",
                payment, original_term, balance, remaining_term_months,
            )
        new_term = solve_term(new_balance, payment, rate)
        original_payment = new_payment = payment
    else:
        original_term = remaining_term_months
        original_payment = payment
        if new_balance == 0:
            new_term, new_payment = 0, ZERO
        else:
            new_term = remaining_term_months
            new_payment = round_currency(level_payment(new_balance, rate, new_term))

    original_total_interest = _total_interest(original_payment, original_term, balance)
    new_total_interest = _total_interest(new_payment, new_term, new_balance)

    logger.debug(
        "Prepayment %s (%s): term %d -> %d, payment %s -> %s",
        amount, prepayment_type.value, original_term, new_term, original_payment, new_payment,
    )
    return PrepaymentResult(
        prepayment_amount=amount,
        prepayment_date=prepayment_date,
        prepayment_type=prepayment_type,
        original_term=original_term,
        new_term=new_term,
        term_reduction=original_term - new_term,
        original_payment=original_payment,
        new_payment=new_payment,
        payment_reduction=original_payment - new_payment,
        original_total_interest=original_total_interest,
        new_total_interest=new_total_interest,
        interest_savings=original_total_interest - new_total_interest,
    )
