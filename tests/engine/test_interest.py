from datetime import date
from decimal import Decimal

from lendcalc.engine.interest import (
    accrued_interest,
    effective_annual_rate,
    payoff_quote,
    per_diem,
    periodic_rate,
)
from lendcalc.models.loan import DayCountConvention, PaymentFrequency


class TestPeriodicRate:
    def test_monthly(self):
        assert periodic_rate(Decimal("6")) == Decimal("0.005")

    def test_biweekly(self):
        assert periodic_rate(Decimal("5.2"), PaymentFrequency.BIWEEKLY) == Decimal("0.002")

    def test_zero(self):
        assert periodic_rate(Decimal("0")) == 0


class TestAccruedInterest:
    def test_thirty_360_month(self):
        interest = accrued_interest(
            Decimal("10000"), Decimal("6"), date(2024, 1, 1), date(2024, 2, 1), DayCountConvention.THIRTY_360
        )
        assert interest == Decimal("50.00")

    def test_actual_365(self):
        """$10K * 6% * 31/365 = $50.958..."""
        interest = accrued_interest(
            Decimal("10000"), Decimal("6"), date(2024, 1, 1), date(2024, 2, 1), DayCountConvention.ACTUAL_365
        )
        assert interest == Decimal("50.96")

    def test_actual_360(self):
        interest = accrued_interest(
            Decimal("10000"), Decimal("6"), date(2024, 1, 1), date(2024, 2, 1), DayCountConvention.ACTUAL_360
        )
        assert interest == Decimal("51.67")

    def test_no_accrual_when_end_not_after_start(self):
        interest = accrued_interest(
            Decimal("10000"), Decimal("6"), date(2024, 2, 1), date(2024, 2, 1), DayCountConvention.ACTUAL_365
        )
        assert interest == Decimal("0.00")


class TestPerDiemAndPayoff:
    def test_per_diem_actual_365(self):
        assert per_diem(Decimal("100000"), Decimal("5"), DayCountConvention.ACTUAL_365, 2023) == Decimal("13.70")

    def test_per_diem_actual_actual_leap_year(self):
        assert per_diem(Decimal("100000"), Decimal("5"), DayCountConvention.ACTUAL_ACTUAL, 2024) == Decimal("13.66")

    def test_payoff_quote(self):
        quote = payoff_quote(
            Decimal("100000"), Decimal("6"), date(2024, 1, 1), date(2024, 1, 16), DayCountConvention.ACTUAL_360
        )
        assert quote.accrued_interest == Decimal("250.00")
        assert quote.per_diem == Decimal("16.67")
        assert quote.total == Decimal("100250.00")
        assert quote.payoff_date == date(2024, 1, 16)


class TestEffectiveAnnualRate:
    def test_monthly_compounding(self):
        assert effective_annual_rate(Decimal("12")) == Decimal("12.6825")

    def test_zero_rate(self):
        assert effective_annual_rate(Decimal("0")) == Decimal("0.0000")

    def test_more_frequent_compounding_is_higher(self):
        monthly = effective_annual_rate(Decimal("6"), PaymentFrequency.MONTHLY)
        weekly = effective_annual_rate(Decimal("6"), PaymentFrequency.WEEKLY)
        assert weekly > monthly > Decimal("6")
