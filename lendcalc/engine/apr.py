"""Annual percentage rate of a payment schedule using scipy.

Pure functions. No I/O.
"""

import logging
from decimal import Decimal

from scipy.optimize import brentq

from lendcalc.engine.dates import periods_per_year
from lendcalc.engine.precision import Amount, ZERO, round_percentage, to_decimal
from lendcalc.models.loan import PaymentFrequency
from lendcalc.models.schedule import PaymentSchedule

logger = logging.getLogger(__name__)


def annual_percentage_rate(
    schedule: PaymentSchedule,
    principal: Amount,
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
    finance_charges: Amount = ZERO,
) -> Decimal:
    """Nominal annual rate (percent) equating the schedule's payments to the amount financed.

    Amount financed = principal - finance_charges. Solves the periodic IRR
    with Brent's method on NPV and multiplies by periods per year.
    """
    amount_financed = to_decimal(principal, "principal") - to_decimal(finance_charges, "finance_charges")
    flows = [float(e.total_payment) for e in schedule.entries]
    financed = float(amount_financed)

    if amount_financed <= 0 or not flows:
        return Decimal("0")
    if sum(flows) <= financed:
        # Payments do not exceed what was lent: no finance charge
        return Decimal("0")

    def npv(rate: float) -> float:
        # Negative exponents underflow to 0.0 instead of overflowing on long schedules
        return sum(cf * (1 + rate) ** -t for t, cf in enumerate(flows, start=1)) - financed

    try:
        periodic = brentq(npv, 0.0, 1.0, xtol=1e-12, maxiter=1000)
    except ValueError:
        logger.warning("No APR found in range for amount financed %s", amount_financed)
        return Decimal("0")

    return round_percentage(Decimal(str(periodic)) * periods_per_year(frequency) * 100)
