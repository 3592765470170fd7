"""Level payment and amortization schedule computation.

Pure functions: LoanTerms in, frozen dataclasses out. No I/O.

Interest for a regular period is round(balance * periodic rate). The final
period retires whatever balance is left, so rounding drift accumulated over
the schedule lands in the last installment and the balance ends at exactly 0.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_CEILING

from lendcalc.config import settings
from lendcalc.engine.dates import default_first_payment_date, number_of_payments, payment_date
from lendcalc.engine.interest import accrued_interest, periodic_rate
from lendcalc.engine.precision import Amount, ZERO, round_currency, to_decimal
from lendcalc.engine.validators import coerce_prepayment_type, validate_loan_terms
from lendcalc.errors import InvalidPrepayment, UnpayableAtCurrentPayment
from lendcalc.models.loan import LoanTerms, LoanType, PrepaymentType
from lendcalc.models.schedule import AmortizationScheduleEntry, PaymentCalculation, PaymentSchedule

logger = logging.getLogger(__name__)


def level_payment(principal: Decimal, rate: Decimal, periods: int, future_balance: Decimal = ZERO) -> Decimal:
    """Unrounded installment that takes principal down to future_balance in periods.

    M = (P - F / (1+r)^n) * r(1+r)^n / ((1+r)^n - 1); with r = 0, M = (P - F) / n.
    """
    if rate == 0:
        return (principal - future_balance) / periods
    factor = (1 + rate) ** periods
    return (principal - future_balance / factor) * rate * factor / (factor - 1)


def balance_after(principal: Decimal, rate: Decimal, payment: Decimal, periods: int) -> Decimal:
    """Balance left after paying `payment` for `periods` periods, before rounding."""
    if rate == 0:
        return principal - payment * periods
    factor = (1 + rate) ** periods
    return principal * factor - payment * (factor - 1) / rate


def solve_term(balance: Decimal, payment: Decimal, rate: Decimal, tolerance: Decimal = ZERO) -> int:
    """Number of installments of `payment` that retire `balance`.

    n = ceil(-ln(1 - r*B/P) / ln(1 + r)), or ceil(B/P) when r = 0. A fraction
    of a period no larger than `tolerance` is dropped before the ceiling; schedules
    pass settings.term_tolerance so a few cents of rounding drift land in the
    final installment instead of adding a period.
    """
    if balance <= 0:
        return 0
    if rate == 0:
        exact = balance / payment
    else:
        ratio = rate * balance / payment
        if ratio >= 1:
            raise UnpayableAtCurrentPayment(balance, payment, rate)
        exact = -(1 - ratio).ln() / (1 + rate).ln()
    periods = int((exact - tolerance).to_integral_value(rounding=ROUND_CEILING))
    return max(periods, 1)


def _final_payment_number(terms: LoanTerms) -> int:
    if terms.balloon is not None:
        return terms.balloon.payment_number
    return number_of_payments(terms.term_months, terms.payment_frequency)


def _regular_payment(terms: LoanTerms) -> Decimal:
    rate = periodic_rate(terms.annual_rate, terms.payment_frequency)
    balloon = terms.balloon
    if balloon is not None and balloon.amount is not None:
        payment = level_payment(terms.principal, rate, balloon.payment_number, balloon.amount)
    else:
        payment = level_payment(
            terms.principal, rate, number_of_payments(terms.term_months, terms.payment_frequency)
        )
    return round_currency(payment)


def calculate_payment(terms: LoanTerms) -> PaymentCalculation:
    """Level installment and the total interest it implies.

    total_interest = payment * k + B - principal, where k is the final payment
    number and B the balloon due with it (0 for a fully amortizing loan).
    """
    terms = validate_loan_terms(terms)
    payment = _regular_payment(terms)
    final_number = _final_payment_number(terms)

    balloon_due = ZERO
    if terms.balloon is not None:
        if terms.balloon.amount is not None:
            balloon_due = terms.balloon.amount
        else:
            rate = periodic_rate(terms.annual_rate, terms.payment_frequency)
            balloon_due = max(balance_after(terms.principal, rate, payment, final_number), ZERO)

    total_interest = round_currency(payment * final_number + balloon_due - terms.principal)
    return PaymentCalculation(payment_amount=payment, total_interest=total_interest)


def _uses_daily_interest(terms: LoanTerms, number: int) -> bool:
    if terms.loan_type is LoanType.SIMPLE_INTEREST:
        return True
    return terms.loan_type is LoanType.BLENDED and number >= terms.blend_switch_payment


def _period_interest(terms: LoanTerms, balance: Decimal, number: int, period_start: date, due: date) -> Decimal:
    irregular_first = number == 1 and terms.first_payment_date != default_first_payment_date(
        terms.start_date, terms.payment_frequency
    )
    if irregular_first or _uses_daily_interest(terms, number):
        return accrued_interest(balance, terms.annual_rate, period_start, due, terms.day_count_convention)
    return round_currency(balance * periodic_rate(terms.annual_rate, terms.payment_frequency))


def _build_entries(
    terms: LoanTerms,
    balance: Decimal,
    payment: Decimal,
    numbers: range,
    final_number: int,
    period_start: date,
    cumulative_interest: Decimal = ZERO,
    cumulative_principal: Decimal = ZERO,
    prepayment: Decimal = ZERO,
) -> list[AmortizationScheduleEntry]:
    """Amortize `balance` over the payment numbers in `numbers`.

    `prepayment` is extra principal paid with the first installment built.
    Stops early once the balance reaches zero.
    """
    entries: list[AmortizationScheduleEntry] = []
    balloon = terms.balloon

    for number in numbers:
        due = payment_date(terms.first_payment_date, number - 1, terms.payment_frequency, terms.payment_day)
        interest = _period_interest(terms, balance, number, period_start, due)
        extra = prepayment if number == numbers.start else ZERO
        balloon_payment = None

        if number == final_number:
            principal = balance
            total = principal + interest
            scheduled = total
            if balloon is not None and number == balloon.payment_number:
                if balloon.amount is not None:
                    balloon_payment = balloon.amount
                else:
                    balloon_payment = max(total - payment, ZERO)
        else:
            principal = min(max(payment - interest, ZERO) + extra, balance)
            total = principal + interest
            scheduled = payment

        beginning = balance
        balance = balance - principal
        cumulative_interest += interest
        cumulative_principal += principal

        entries.append(AmortizationScheduleEntry(
            payment_number=number,
            payment_date=due,
            scheduled_payment=scheduled,
            principal_payment=principal,
            interest_payment=interest,
            total_payment=total,
            beginning_balance=beginning,
            remaining_balance=balance,
            cumulative_interest=cumulative_interest,
            cumulative_principal=cumulative_principal,
            balloon_payment=balloon_payment,
        ))
        period_start = due

        if balance == 0:
            break

    return entries


def _assemble(terms: LoanTerms, entries: list[AmortizationScheduleEntry], payment: Decimal) -> PaymentSchedule:
    total_interest = sum((e.interest_payment for e in entries), ZERO)
    total_principal = sum((e.principal_payment for e in entries), ZERO)
    return PaymentSchedule(
        entries=entries,
        total_payments=total_interest + total_principal,
        total_interest=total_interest,
        total_principal=total_principal,
        monthly_payment=payment,
        first_payment_date=entries[0].payment_date,
        last_payment_date=entries[-1].payment_date,
        term_months=terms.term_months,
    )


def generate_schedule(terms: LoanTerms) -> PaymentSchedule:
    """Full per-period schedule for the loan.

    With a balloon the schedule stops at the balloon payment, whose installment
    is the remaining balance plus the interest due.
    """
    terms = validate_loan_terms(terms)
    payment = _regular_payment(terms)
    final_number = _final_payment_number(terms)

    entries = _build_entries(
        terms,
        balance=terms.principal,
        payment=payment,
        numbers=range(1, final_number + 1),
        final_number=final_number,
        period_start=terms.start_date,
    )
    logger.debug(
        "Generated %d-entry schedule: principal=%s rate=%s payment=%s",
        len(entries), terms.principal, terms.annual_rate, payment,
    )
    return _assemble(terms, entries, payment)


def recalculate_schedule_with_prepayment(
    terms: LoanTerms,
    prepayment_amount: Amount,
    prepayment_date: date,
    prepayment_type: PrepaymentType,
) -> PaymentSchedule:
    """Apply extra principal to a loan's schedule and re-amortize what is left.

    The prepayment is paid with the first installment due on or after
    prepayment_date; earlier entries are unchanged. Reduce-term keeps the
    installment and shortens the loan. Reduce-payment keeps the maturity and
    lowers the installment.
    """
    terms = validate_loan_terms(terms)
    amount = round_currency(to_decimal(prepayment_amount, "prepayment_amount"))
    prepayment_type = coerce_prepayment_type(prepayment_type)
    if amount < 0:
        raise InvalidPrepayment("prepayment_amount cannot be negative")
    if terms.balloon is not None:
        raise InvalidPrepayment("schedule recalculation does not support balloon loans")

    original = generate_schedule(terms)
    index = next(
        (i for i, e in enumerate(original.entries) if e.payment_date >= prepayment_date), None
    )
    if index is None:
        raise InvalidPrepayment(f"prepayment date {prepayment_date} is after the last payment")

    applied_on = original.entries[index]
    if amount > applied_on.beginning_balance:
        raise InvalidPrepayment(
            f"prepayment {amount} exceeds the balance {applied_on.beginning_balance}"
        )

    kept = original.entries[:index]
    period_start = kept[-1].payment_date if kept else terms.start_date
    cumulative_interest = kept[-1].cumulative_interest if kept else ZERO
    cumulative_principal = kept[-1].cumulative_principal if kept else ZERO
    original_final = original.final_entry.payment_number

    payment = original.monthly_payment
    prepaid = _build_entries(
        terms,
        balance=applied_on.beginning_balance,
        payment=payment,
        numbers=range(applied_on.payment_number, applied_on.payment_number + 1),
        final_number=original_final,
        period_start=period_start,
        cumulative_interest=cumulative_interest,
        cumulative_principal=cumulative_principal,
        prepayment=amount,
    )
    entries = kept + prepaid
    balance = prepaid[-1].remaining_balance

    if balance > 0:
        next_number = applied_on.payment_number + 1
        rate = periodic_rate(terms.annual_rate, terms.payment_frequency)
        if prepayment_type is PrepaymentType.REDUCE_TERM:
            remaining = solve_term(balance, payment, rate, settings.term_tolerance)
            final_number = applied_on.payment_number + remaining
        else:
            final_number = original_final
            payment = round_currency(level_payment(balance, rate, final_number - applied_on.payment_number))
        entries += _build_entries(
            terms,
            balance=balance,
            payment=payment,
            numbers=range(next_number, final_number + 1),
            final_number=final_number,
            period_start=prepaid[-1].payment_date,
            cumulative_interest=prepaid[-1].cumulative_interest,
            cumulative_principal=prepaid[-1].cumulative_principal,
        )

    logger.info(
        "Prepayment of %s on payment %d (%s): %d -> %d payments",
        amount, applied_on.payment_number, prepayment_type.value,
        len(original.entries), len(entries),
    )
    return _assemble(terms, entries, payment)
