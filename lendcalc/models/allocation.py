from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class AllocationOptions:
    """Caller-supplied charges due with a payment. Computed elsewhere, not here."""
    fee_amount: Decimal = Decimal("0")
    penalty_amount: Decimal = Decimal("0")
    escrow_amount: Decimal = Decimal("0")
    late_fee_amount: Decimal = Decimal("0")
    other_fee_amount: Decimal = Decimal("0")
    minimum_interest: Decimal = Decimal("0")  # Floor on the interest bucket


@dataclass(frozen=True)
class PaymentAllocation:
    principal: Decimal
    interest: Decimal
    fees: Decimal
    penalties: Decimal
    escrow: Decimal
    late_fees: Decimal
    other_fees: Decimal
    total: Decimal

    @property
    def components_total(self) -> Decimal:
        return (
            self.principal
            + self.interest
            + self.fees
            + self.penalties
            + self.escrow
            + self.late_fees
            + self.other_fees
        )
