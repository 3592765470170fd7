"""Split a received payment across interest, charges and principal.

Pure functions: Decimal in, dataclass out. No I/O.

Buckets are filled in a fixed servicing order and each takes at most what is
left of the payment, so the components can never sum to more than the total.
"""

import logging
from dataclasses import replace
from decimal import Decimal

from lendcalc.config import settings
from lendcalc.engine.precision import Amount, ZERO, round_currency, to_decimal
from lendcalc.errors import AllocationReconciliationFailure, InvalidPaymentInput, PaymentExceedsPayoff
from lendcalc.models.allocation import AllocationOptions, PaymentAllocation

logger = logging.getLogger(__name__)

# Order matters: servicing convention, never reorder.
CHARGE_BUCKETS = (
    ("fees", "fee_amount"),
    ("penalties", "penalty_amount"),
    ("escrow", "escrow_amount"),
    ("late_fees", "late_fee_amount"),
    ("other_fees", "other_fee_amount"),
)

RESIDUAL_TARGETS = ("principal", "interest")


def _non_negative_amount(value: Amount, name: str) -> Decimal:
    amount = round_currency(to_decimal(value, name))
    if amount < 0:
        raise InvalidPaymentInput(f"{name} cannot be negative, got {amount}")
    return amount


def _reconcile(allocation: PaymentAllocation, target: str, balance: Decimal) -> PaymentAllocation:
    """Push any residual cent into the target bucket, then re-check the sum."""
    residual = allocation.total - allocation.components_total
    if residual == 0:
        return allocation

    logger.warning("Reconciling allocation residual %s into %s", residual, target)
    adjusted = getattr(allocation, target) + residual
    if adjusted < 0 or (target == "principal" and adjusted > balance):
        raise AllocationReconciliationFailure(
            f"Residual {residual} cannot be absorbed by {target} ({getattr(allocation, target)})"
        )
    allocation = replace(allocation, **{target: adjusted})
    if allocation.components_total != allocation.total:
        raise AllocationReconciliationFailure(
            f"Components sum to {allocation.components_total}, expected {allocation.total}"
        )
    return allocation


def allocate_payment(
    payment_amount: Amount,
    current_balance: Amount,
    monthly_rate: Amount,
    options: AllocationOptions | None = None,
    residual_target: str | None = None,
) -> PaymentAllocation:
    """Allocate one payment: interest, fees, penalties, escrow, late fees, other fees, principal.

    Interest due is round(balance * monthly_rate), floored at
    options.minimum_interest. Principal takes the remainder, capped at the
    balance. A payment that is still not used up after the full balance raises
    PaymentExceedsPayoff.

    Args:
        payment_amount: Amount received, rounded to the cent first.
        current_balance: Outstanding principal before this payment.
        monthly_rate: Periodic rate as a fraction (see interest.periodic_rate).
        options: Charges due with this payment.
        residual_target: "principal" or "interest"; defaults to settings.residual_target.
    """
    amount = _non_negative_amount(payment_amount, "payment_amount")
    balance = _non_negative_amount(current_balance, "current_balance")
    rate = to_decimal(monthly_rate, "monthly_rate")
    if rate < 0:
        raise InvalidPaymentInput(f"monthly_rate cannot be negative, got {rate}")
    options = options or AllocationOptions()
    target = residual_target or settings.residual_target
    if target not in RESIDUAL_TARGETS:
        raise InvalidPaymentInput(f"residual_target must be one of {RESIDUAL_TARGETS}, got {target!r}")

    remaining = amount
    interest_due = max(
        round_currency(balance * rate, "interest_due"),
        _non_negative_amount(options.minimum_interest, "minimum_interest"),
    )
    interest = min(remaining, interest_due)
    remaining -= interest

    charges: dict[str, Decimal] = {}
    for field, option in CHARGE_BUCKETS:
        requested = _non_negative_amount(getattr(options, option), option)
        charges[field] = min(remaining, requested)
        remaining -= charges[field]

    principal = min(remaining, balance)
    remaining -= principal
    if remaining > 0:
        raise PaymentExceedsPayoff(amount, amount - remaining)

    allocation = PaymentAllocation(principal=principal, interest=interest, total=amount, **charges)
    allocation = _reconcile(allocation, target, balance)

    logger.debug(
        "Allocated %s: interest=%s principal=%s charges=%s",
        amount, allocation.interest, allocation.principal, sum(charges.values(), ZERO),
    )
    return allocation


def validate_payment_allocation(allocation: PaymentAllocation, expected_total: Amount) -> Decimal:
    """Discrepancy between expected_total and the allocation's components. 0 when consistent."""
    expected = round_currency(to_decimal(expected_total, "expected_total"))
    return round_currency(expected - round_currency(allocation.components_total))
