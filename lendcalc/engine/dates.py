"""Payment calendar and day-count conventions.

Pure functions. No I/O.

Calendar policy:
    monthly   first payment date + k months, due on the anchor day. Days past the end
              of a shorter month clamp to its last day. The anchor defaults to the
              first payment date's day, or month-end when that date is a month-end.
    biweekly  first payment date + 14k days
    weekly    first payment date + 7k days
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from lendcalc.config import settings
from lendcalc.models.loan import DayCountConvention, PaymentFrequency

PERIODS_PER_YEAR = {
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.BIWEEKLY: 26,
    PaymentFrequency.WEEKLY: 52,
}

DAYS_PER_PERIOD = {
    PaymentFrequency.BIWEEKLY: 14,
    PaymentFrequency.WEEKLY: 7,
}

AVERAGE_DAYS_PER_MONTH = Decimal("365.25") / 12


def periods_per_year(frequency: PaymentFrequency) -> int:
    return PERIODS_PER_YEAR[frequency]


def number_of_payments(term_months: int, frequency: PaymentFrequency) -> int:
    """Number of installments needed to cover term_months at the given frequency."""
    if frequency is PaymentFrequency.MONTHLY:
        return term_months
    days = Decimal(term_months) * AVERAGE_DAYS_PER_MONTH
    return int(days / DAYS_PER_PERIOD[frequency])


def is_month_end(d: date) -> bool:
    return d.day == calendar.monthrange(d.year, d.month)[1]


def anchor_day(d: date) -> int:
    """Monthly due day implied by d: its day of month, or 31 for a month-end."""
    return 31 if is_month_end(d) else d.day


def payment_date(
    first_payment_date: date, k: int, frequency: PaymentFrequency, day: int | None = None
) -> date:
    """Date of the installment k periods after the first one (k=0 is the first).

    day pins monthly installments to a day of month, clamped at month-end.
    """
    if frequency is PaymentFrequency.MONTHLY:
        if day is None:
            day = anchor_day(first_payment_date)
        return first_payment_date + relativedelta(months=k, day=day)
    return first_payment_date + timedelta(days=DAYS_PER_PERIOD[frequency] * k)


def default_first_payment_date(start_date: date, frequency: PaymentFrequency) -> date:
    """One period after start_date; monthly loans keep start_date's due day."""
    return payment_date(start_date, 1, frequency)


def resolve_convention(convention: DayCountConvention | None) -> DayCountConvention:
    if convention is None:
        return DayCountConvention(settings.day_count_convention)
    return convention


def day_count(start: date, end: date, convention: DayCountConvention) -> int:
    """Days between two dates under the convention."""
    if convention is DayCountConvention.THIRTY_360:
        d1 = min(start.day, 30)
        d2 = end.day
        if d2 == 31 and d1 >= 30:
            d2 = 30
        return (end.year - start.year) * 360 + (end.month - start.month) * 30 + (d2 - d1)
    return (end - start).days


def year_basis(convention: DayCountConvention, year: int) -> int:
    if convention in (DayCountConvention.THIRTY_360, DayCountConvention.ACTUAL_360):
        return 360
    if convention is DayCountConvention.ACTUAL_ACTUAL and calendar.isleap(year):
        return 366
    return 365


def year_fraction(start: date, end: date, convention: DayCountConvention) -> Decimal:
    return Decimal(day_count(start, end, convention)) / Decimal(year_basis(convention, start.year))
