"""Decimal precision layer: strict coercion and rounding policy.

Pure functions: Decimal in, Decimal out. No I/O.

Every monetary value leaving an engine function goes through round_currency.
Intermediate math runs at the context precision and may be pinned to
CALCULATION_PLACES where a stable intermediate is needed.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN, getcontext

from lendcalc.errors import InvalidNumericInput

CURRENCY_PLACES = 2
PERCENTAGE_PLACES = 4
CALCULATION_PLACES = 6

ZERO = Decimal("0")
ONE_CENT = Decimal("0.01")

# Anything to_decimal accepts
Amount = Decimal | int | float | str


def _integer_digits_limit() -> int:
    # Room left in the active context once CALCULATION_PLACES are reserved.
    return getcontext().prec - CALCULATION_PLACES


def to_decimal(value: object, name: str = "value") -> Decimal:
    """Coerce value to a finite Decimal or raise InvalidNumericInput.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion.
    Values too large to carry CALCULATION_PLACES at the context precision are
    rejected here rather than failing later inside quantize.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidNumericInput(name, value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            raise InvalidNumericInput(name, value) from None
    else:
        raise InvalidNumericInput(name, value)

    if not result.is_finite():
        raise InvalidNumericInput(name, value)
    if result and result.adjusted() + 1 > _integer_digits_limit():
        raise InvalidNumericInput(name, value, reason="is too large to represent exactly")
    return result


def round_to(value: object, digits: int, name: str = "value") -> Decimal:
    """Round half to even at the given number of fractional digits."""
    amount = to_decimal(value, name)
    try:
        return amount.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_EVEN)
    except InvalidOperation:
        raise InvalidNumericInput(name, value, reason="is too large to represent exactly") from None


def round_currency(value: object, name: str = "value") -> Decimal:
    return round_to(value, CURRENCY_PLACES, name)


def round_percentage(value: object, name: str = "value") -> Decimal:
    return round_to(value, PERCENTAGE_PLACES, name)


def round_calculation(value: object, name: str = "value") -> Decimal:
    return round_to(value, CALCULATION_PLACES, name)
