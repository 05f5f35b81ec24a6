"""Rate conversion and payment sizing.

Canadian fixed-rate mortgages quote a nominal annual rate compounded
semi-annually. The effective rate for one payment period is

    periodic = (1 + annual / 2) ** (2 / payments_per_year) - 1

and the level payment is the standard annuity payment over the remaining
number of payments of the whole amortization.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, getcontext

from .data_models import PaymentFrequency
from .errors import InvalidInput

getcontext().prec = 28  # increase precision for financial calculations

# Accelerated bi-weekly uses the plain bi-weekly count; the schedule does not
# raise the payment amount for it.
PAYMENTS_PER_YEAR = {
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.BIWEEKLY: 26,
    PaymentFrequency.ACCELERATED_BIWEEKLY: 26,
    PaymentFrequency.WEEKLY: 52,
}


def payments_per_year(frequency: PaymentFrequency) -> int:
    return PAYMENTS_PER_YEAR[frequency]


def payment_count(years: Decimal, frequency: PaymentFrequency) -> int:
    """Return the nominal number of payments in ``years``, rounded half up."""
    count = Decimal(years) * payments_per_year(frequency)
    return int(count.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def periodic_rate(annual_rate: Decimal, frequency: PaymentFrequency) -> Decimal:
    """Convert a nominal annual rate to the effective rate per payment."""
    if annual_rate < 0:
        raise InvalidInput(f"Interest rate cannot be negative: {annual_rate}")
    semi_annual = annual_rate / Decimal(2)
    exponent = Decimal(2) / Decimal(payments_per_year(frequency))
    return (1 + semi_annual) ** exponent - 1


def level_payment(balance: Decimal, rate: Decimal, remaining: int) -> Decimal:
    """Return the payment that amortizes ``balance`` over ``remaining`` payments.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the balance, ``i`` the periodic rate and ``n`` the number
    of payments left. When the rate is zero the payment is ``P / n``.
    """
    if remaining <= 0:
        raise InvalidInput("Remaining payment count must be positive")
    if rate == 0:
        return balance / Decimal(remaining)
    factor = (1 + rate) ** remaining
    return balance * (rate * factor) / (factor - 1)
