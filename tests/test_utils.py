from datetime import date
from decimal import Decimal

import pytest

from mortgage_calc.data_models import PaymentFrequency
from mortgage_calc.utils import days_for_payment, decimal_from_str, parse_date, payment_date


class TestParsing:
    def test_parse_full_date(self):
        assert parse_date("2025-03-15") == date(2025, 3, 15)

    def test_parse_year_month(self):
        assert parse_date("2025-03") == date(2025, 3, 1)

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_date("March 2025")

    def test_decimal_with_commas(self):
        assert decimal_from_str("1,250,000.50") == Decimal("1250000.50")

    def test_decimal_invalid(self):
        with pytest.raises(ValueError):
            decimal_from_str("abc")


class TestPaymentDates:
    def test_first_payment_on_start_date(self):
        for frequency in PaymentFrequency:
            assert payment_date(date(2025, 1, 1), 1, frequency) == date(2025, 1, 1)

    def test_monthly_average_step(self):
        assert days_for_payment(2, PaymentFrequency.MONTHLY) == 30
        assert days_for_payment(8, PaymentFrequency.MONTHLY) == 213
        # 299 * 30.44 = 9101.56
        assert days_for_payment(300, PaymentFrequency.MONTHLY) == 9102

    def test_weekly_and_biweekly(self):
        assert days_for_payment(3, PaymentFrequency.WEEKLY) == 14
        assert days_for_payment(3, PaymentFrequency.BIWEEKLY) == 28
        assert days_for_payment(3, PaymentFrequency.ACCELERATED_BIWEEKLY) == 28

    def test_monthly_date(self):
        assert payment_date(date(2025, 1, 1), 8, PaymentFrequency.MONTHLY) == date(2025, 8, 2)
