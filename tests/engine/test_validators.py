from datetime import date
from decimal import Decimal

import pytest

from lendcalc.engine.validators import coerce_prepayment_type, validate_loan_terms
from lendcalc.errors import InvalidLoanTerms, InvalidNumericInput, InvalidPrepayment
from lendcalc.models.loan import Balloon, DayCountConvention, LoanType, PaymentFrequency, PrepaymentType


def _problem_fields(exc_info) -> set[str]:
    return {field for field, _ in exc_info.value.problems}


class TestNormalization:
    def test_rounds_principal_and_rate(self, canonical_terms):
        terms = validate_loan_terms(
            canonical_terms.with_changes(principal=Decimal("1000.005"), annual_rate=Decimal("4.123456"))
        )
        assert terms.principal == Decimal("1000.00")
        assert terms.annual_rate == Decimal("4.1235")

    def test_accepts_numeric_strings(self, canonical_terms):
        terms = validate_loan_terms(canonical_terms.with_changes(principal="200,000", annual_rate="4.5"))
        assert terms.principal == Decimal("200000.00")

    def test_defaults_first_payment_date(self, canonical_terms):
        terms = validate_loan_terms(canonical_terms)
        assert terms.first_payment_date == date(2024, 2, 1)

    def test_resolves_day_count_convention(self, canonical_terms):
        terms = validate_loan_terms(canonical_terms)
        assert terms.day_count_convention is DayCountConvention.THIRTY_360

    def test_keeps_explicit_first_payment_date(self, canonical_terms):
        terms = validate_loan_terms(canonical_terms.with_changes(first_payment_date=date(2024, 2, 15)))
        assert terms.first_payment_date == date(2024, 2, 15)

    def test_payment_day_from_start_date(self, canonical_terms):
        terms = validate_loan_terms(canonical_terms.with_changes(start_date=date(2024, 1, 30)))
        assert terms.first_payment_date == date(2024, 2, 29)
        assert terms.payment_day == 30

    def test_payment_day_from_explicit_first_payment(self, canonical_terms):
        terms = validate_loan_terms(canonical_terms.with_changes(first_payment_date=date(2024, 4, 30)))
        assert terms.payment_day == 31

    def test_payment_day_left_unset_for_weekly_loans(self, canonical_terms):
        terms = validate_loan_terms(canonical_terms.with_changes(payment_frequency=PaymentFrequency.WEEKLY))
        assert terms.payment_day is None

    def test_validation_is_idempotent(self, canonical_terms):
        terms = validate_loan_terms(canonical_terms.with_changes(start_date=date(2024, 1, 30)))
        assert validate_loan_terms(terms) == terms

    def test_original_terms_untouched(self, canonical_terms):
        validate_loan_terms(canonical_terms)
        assert canonical_terms.first_payment_date is None


class TestRejections:
    def test_collects_all_problems(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms) as exc_info:
            validate_loan_terms(
                canonical_terms.with_changes(principal=Decimal("0"), annual_rate=Decimal("-1"), term_months=0)
            )
        assert _problem_fields(exc_info) == {"principal", "annual_rate", "term_months"}

    def test_term_ceiling(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="term_months"):
            validate_loan_terms(canonical_terms.with_changes(term_months=601))

    def test_principal_ceiling(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="principal"):
            validate_loan_terms(canonical_terms.with_changes(principal=Decimal("100000000.01")))

    def test_rate_ceiling(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="annual_rate"):
            validate_loan_terms(canonical_terms.with_changes(annual_rate=Decimal("100.5")))

    def test_bool_term_is_not_an_integer(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="must be an integer"):
            validate_loan_terms(canonical_terms.with_changes(term_months=True))

    def test_non_numeric_principal(self, canonical_terms):
        with pytest.raises(InvalidNumericInput):
            validate_loan_terms(canonical_terms.with_changes(principal="lots"))

    def test_oversized_principal(self, canonical_terms):
        with pytest.raises(InvalidNumericInput, match="principal is too large"):
            validate_loan_terms(canonical_terms.with_changes(principal=Decimal("1E+27")))

    @pytest.mark.parametrize("day", [0, 32, "15"])
    def test_payment_day_out_of_range(self, canonical_terms, day):
        with pytest.raises(InvalidLoanTerms) as exc_info:
            validate_loan_terms(canonical_terms.with_changes(payment_day=day))
        assert _problem_fields(exc_info) == {"payment_day"}

    def test_payment_day_only_for_monthly(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="payment_day"):
            validate_loan_terms(
                canonical_terms.with_changes(payment_frequency=PaymentFrequency.WEEKLY, payment_day=15)
            )

    def test_nan_rate(self, canonical_terms):
        with pytest.raises(InvalidNumericInput):
            validate_loan_terms(canonical_terms.with_changes(annual_rate=float("nan")))

    def test_first_payment_before_start(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms) as exc_info:
            validate_loan_terms(canonical_terms.with_changes(first_payment_date=date(2023, 12, 1)))
        assert _problem_fields(exc_info) == {"first_payment_date"}

    def test_balloon_beyond_last_payment(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="balloon.payment_number"):
            validate_loan_terms(canonical_terms.with_changes(balloon=Balloon(payment_number=181)))

    def test_balloon_amount_not_below_principal(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="balloon.amount"):
            validate_loan_terms(
                canonical_terms.with_changes(balloon=Balloon(payment_number=60, amount=Decimal("200000")))
            )

    def test_blended_requires_switch(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="blend_switch_payment"):
            validate_loan_terms(canonical_terms.with_changes(loan_type=LoanType.BLENDED))

    def test_switch_only_for_blended(self, canonical_terms):
        with pytest.raises(InvalidLoanTerms, match="only applies to blended"):
            validate_loan_terms(canonical_terms.with_changes(blend_switch_payment=12))

    def test_invalid_loan_terms_is_value_error(self, canonical_terms):
        with pytest.raises(ValueError):
            validate_loan_terms(canonical_terms.with_changes(principal=Decimal("-5")))


class TestCoercePrepaymentType:
    def test_accepts_value_string(self):
        assert coerce_prepayment_type("reduce_term") is PrepaymentType.REDUCE_TERM

    def test_accepts_member(self):
        assert coerce_prepayment_type(PrepaymentType.REDUCE_PAYMENT) is PrepaymentType.REDUCE_PAYMENT

    def test_rejects_unknown(self):
        with pytest.raises(InvalidPrepayment, match="prepayment_type"):
            coerce_prepayment_type("reduce_everything")
