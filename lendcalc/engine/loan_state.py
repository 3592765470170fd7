"""Computed state of a loan: payment, schedule and APR together."""

from lendcalc.engine.amortization import calculate_payment, generate_schedule
from lendcalc.engine.apr import annual_percentage_rate
from lendcalc.engine.validators import validate_loan_terms
from lendcalc.models.loan import LoanTerms
from lendcalc.models.schedule import LoanState


def compute_loan_state(terms: LoanTerms) -> LoanState:
    terms = validate_loan_terms(terms)
    schedule = generate_schedule(terms)
    return LoanState(
        payment=calculate_payment(terms),
        schedule=schedule,
        annual_percentage_rate=annual_percentage_rate(schedule, terms.principal, terms.payment_frequency),
    )
