"""Error taxonomy for the calculation engine.

Every failure is a structural precondition reported to the immediate caller.
Nothing here is retried or downgraded to a default value.
"""

from decimal import Decimal


class LoanCalculationError(ValueError):
    """Base class for all engine errors."""


class InvalidNumericInput(LoanCalculationError):
    """NaN, infinity or a non-numeric value where a decimal is required."""

    def __init__(self, name: str, value: object, reason: str = "must be a finite number"):
        self.name = name
        self.value = value
        super().__init__(f"{name} {reason}, got {value!r}")


class InvalidLoanTerms(LoanCalculationError):
    """One or more loan terms violate a structural precondition."""

    def __init__(self, problems: list[tuple[str, str]]):
        self.problems = problems
        detail = "; ".join(f"{field}: {message}" for field, message in problems)
        super().__init__(f"Invalid loan terms: {detail}")


class InvalidPrepayment(LoanCalculationError):
    pass


class InvalidPaymentInput(LoanCalculationError):
    """A payment or charge amount that cannot be allocated, such as a negative fee."""


class UnpayableAtCurrentPayment(LoanCalculationError):
    """The payment does not cover the interest accruing on the balance."""

    def __init__(self, balance: Decimal, payment: Decimal, periodic_rate: Decimal):
        self.balance = balance
        self.payment = payment
        self.periodic_rate = periodic_rate
        super().__init__(
            f"Payment {payment} cannot amortize balance {balance} "
            f"at periodic rate {periodic_rate}"
        )


class PaymentExceedsPayoff(LoanCalculationError):
    """Payment is larger than interest, charges and the full balance combined."""

    def __init__(self, payment_amount: Decimal, payoff_amount: Decimal):
        self.payment_amount = payment_amount
        self.payoff_amount = payoff_amount
        super().__init__(
            f"Payment {payment_amount} exceeds the payoff amount {payoff_amount}; "
            "overpayments must be refunded or handled as a payoff"
        )


class AllocationReconciliationFailure(LoanCalculationError, AssertionError):
    """Allocation components do not sum to the total after reconciliation.

    Unreachable for correct code. Treat as a defect, never as a business outcome.
    """
