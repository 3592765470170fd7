"""Structural validation of loan terms.

All problems are collected before raising so callers can report them together.
"""

from datetime import date

from lendcalc.config import settings
from lendcalc.engine.dates import anchor_day, default_first_payment_date, number_of_payments, resolve_convention
from lendcalc.engine.precision import round_currency, round_percentage, to_decimal
from lendcalc.errors import InvalidLoanTerms, InvalidPrepayment
from lendcalc.models.loan import Balloon, LoanTerms, LoanType, PaymentFrequency, PrepaymentType


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_loan_terms(terms: LoanTerms) -> LoanTerms:
    """Validate terms and return a normalized copy.

    The copy has currency-rounded principal, percentage-rounded rate, a resolved
    first payment date and day-count convention. Non-numeric amounts raise
    InvalidNumericInput; every structural problem is reported in one
    InvalidLoanTerms.
    """
    principal = round_currency(to_decimal(terms.principal, "principal"))
    annual_rate = round_percentage(to_decimal(terms.annual_rate, "annual_rate"))
    problems: list[tuple[str, str]] = []

    if principal <= 0:
        problems.append(("principal", "must be greater than zero"))
    elif principal > settings.max_principal:
        problems.append(("principal", f"exceeds the maximum of {settings.max_principal}"))

    if annual_rate < 0:
        problems.append(("annual_rate", "cannot be negative"))
    elif annual_rate > settings.max_annual_rate:
        problems.append(("annual_rate", f"cannot exceed {settings.max_annual_rate}%"))

    term_ok = False
    if not _is_integer(terms.term_months):
        problems.append(("term_months", "must be an integer"))
    elif terms.term_months <= 0:
        problems.append(("term_months", "must be greater than zero"))
    elif terms.term_months > settings.max_term_months:
        problems.append(("term_months", f"cannot exceed {settings.max_term_months} months"))
    else:
        term_ok = True

    if not isinstance(terms.start_date, date):
        problems.append(("start_date", "must be a date"))
    if terms.first_payment_date is not None and not isinstance(terms.first_payment_date, date):
        problems.append(("first_payment_date", "must be a date"))
    if not isinstance(terms.payment_frequency, PaymentFrequency):
        problems.append(("payment_frequency", f"must be one of {[f.value for f in PaymentFrequency]}"))
    if not isinstance(terms.loan_type, LoanType):
        problems.append(("loan_type", f"must be one of {[t.value for t in LoanType]}"))
    if problems:
        raise InvalidLoanTerms(problems)

    n_payments = number_of_payments(terms.term_months, terms.payment_frequency) if term_ok else 0
    if term_ok and n_payments < 1:
        problems.append(("term_months", "too short for a single payment at this frequency"))

    first_payment_date = terms.first_payment_date
    if first_payment_date is None:
        first_payment_date = default_first_payment_date(terms.start_date, terms.payment_frequency)
    elif first_payment_date < terms.start_date:
        problems.append(("first_payment_date", "cannot be before start_date"))

    payment_day = terms.payment_day
    if terms.payment_frequency is not PaymentFrequency.MONTHLY:
        if payment_day is not None:
            problems.append(("payment_day", "only applies to monthly loans"))
    elif payment_day is None:
        payment_day = anchor_day(terms.first_payment_date or terms.start_date)
    elif not _is_integer(payment_day) or not 1 <= payment_day <= 31:
        problems.append(("payment_day", "must be a day of month between 1 and 31"))

    balloon = terms.balloon
    if balloon is not None:
        balloon_amount = None
        if not _is_integer(balloon.payment_number) or not 1 <= balloon.payment_number <= n_payments:
            problems.append(("balloon.payment_number", f"must be between 1 and {n_payments}"))
        if balloon.amount is not None:
            balloon_amount = round_currency(to_decimal(balloon.amount, "balloon.amount"))
            if balloon_amount < 0:
                problems.append(("balloon.amount", "cannot be negative"))
            elif balloon_amount >= principal:
                problems.append(("balloon.amount", "must be less than principal"))
        balloon = Balloon(payment_number=balloon.payment_number, amount=balloon_amount)

    if terms.loan_type is LoanType.BLENDED:
        switch = terms.blend_switch_payment
        if not _is_integer(switch) or not 1 <= switch <= n_payments:
            problems.append(("blend_switch_payment", f"blended loans need a switch payment between 1 and {n_payments}"))
    elif terms.blend_switch_payment is not None:
        problems.append(("blend_switch_payment", "only applies to blended loans"))

    if problems:
        raise InvalidLoanTerms(problems)

    return terms.with_changes(
        principal=principal,
        annual_rate=annual_rate,
        first_payment_date=first_payment_date,
        payment_day=payment_day,
        balloon=balloon,
        day_count_convention=resolve_convention(terms.day_count_convention),
    )


def coerce_prepayment_type(value: PrepaymentType | str) -> PrepaymentType:
    """Accept a PrepaymentType or its string value."""
    try:
        return PrepaymentType(value)
    except ValueError:
        raise InvalidPrepayment(
            f"prepayment_type must be one of {[t.value for t in PrepaymentType]}, got {value!r}"
        ) from None
