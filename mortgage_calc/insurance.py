"""Mortgage default insurance (CMHC) calculation.

In Canada default insurance is required when the down payment is below 20 %
of the purchase price. The premium is a percentage of the mortgage amount and
is added to the financed principal, as is any provincial sales tax levied on
the premium and any additional financing (home improvements and the like).
"""

from __future__ import annotations

from decimal import Decimal

from .data_models import FinancingDetails
from .errors import DOWN_PAYMENT_BELOW_MINIMUM, InvalidInput

# (minimum down payment percent, premium rate), highest band first
PREMIUM_BANDS = (
    (Decimal("20"), Decimal("0")),
    (Decimal("15"), Decimal("0.028")),
    (Decimal("10"), Decimal("0.031")),
    (Decimal("5"), Decimal("0.04")),
)


def premium_rate(down_payment_percent: Decimal) -> Decimal:
    """Return the insurance premium rate for a down payment percentage.

    Raises
    ------
    InvalidInput
        If the down payment is below the 5 % minimum.
    """
    for minimum, rate in PREMIUM_BANDS:
        if down_payment_percent >= minimum:
            return rate
    raise InvalidInput(
        "Down payment must be at least 5% for properties up to $500,000",
        kind=DOWN_PAYMENT_BELOW_MINIMUM,
    )


def compute_financing(
    purchase_price: Decimal,
    down_payment_percent: Decimal,
    additional_financing: Decimal = Decimal("0"),
    surtax_rate: Decimal = Decimal("0"),
) -> FinancingDetails:
    """Derive the insured, financed principal from purchase inputs.

    The down payment percentage applies to the purchase price only; additional
    financing is added after the premium is computed and never attracts
    insurance.
    """
    if purchase_price <= 0:
        raise InvalidInput("Purchase price must be positive")
    if additional_financing < 0:
        raise InvalidInput("Additional financing cannot be negative")
    if surtax_rate < 0:
        raise InvalidInput("Insurance surtax rate cannot be negative")

    rate = premium_rate(down_payment_percent)
    down_payment = purchase_price * (down_payment_percent / Decimal(100))
    mortgage_amount = purchase_price - down_payment
    premium = mortgage_amount * rate
    surtax = premium * surtax_rate
    total_principal = mortgage_amount + premium + surtax + additional_financing

    return FinancingDetails(
        purchase_price=purchase_price,
        down_payment_percent=down_payment_percent,
        down_payment=down_payment,
        mortgage_amount=mortgage_amount,
        premium_rate=rate,
        premium=premium,
        surtax_rate=surtax_rate,
        surtax=surtax,
        additional_financing=additional_financing,
        total_principal=total_principal,
    )
