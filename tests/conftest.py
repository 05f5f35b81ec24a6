"""Shared fixtures.

Base mortgage: $500K purchase, 20% down ($400K principal, no insurance),
25-year monthly amortization, one 5-year term at 5%, first payment 2025-01-01.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from mortgage_calc.data_models import MortgageParams, PaymentFrequency, RenewalPeriod


@pytest.fixture
def base_params() -> MortgageParams:
    return MortgageParams(
        purchase_price=Decimal("500000"),
        down_payment_percent=Decimal("20"),
        amortization_years=Decimal("25"),
        payment_frequency=PaymentFrequency.MONTHLY,
        start_date=date(2025, 1, 1),
        renewal_periods=[RenewalPeriod(1, Decimal("0.05"), Decimal("5"))],
    )


@pytest.fixture
def limit_params(base_params) -> MortgageParams:
    """$703,125 purchase with 20% down: exactly $562,500 financed."""
    return replace(base_params, purchase_price=Decimal("703125"))
