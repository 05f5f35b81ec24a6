"""Additional payments and prepayment privilege limits.

Most Canadian lenders allow a yearly lump-sum prepayment up to a percentage
of the original principal. The allowance resets either every calendar year or
on every anniversary of the mortgage. ``LimitTracker`` keeps the running total
for the current limit period during one schedule calculation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from .data_models import AdditionalPayment, AdditionalPaymentType, ResetPeriod

logger = logging.getLogger(__name__)


def additional_payment_amount(payment_number: int, additional_payments: Iterable[AdditionalPayment]) -> Decimal:
    """Return the total additional amount due at ``payment_number``."""
    total = Decimal("0")
    for extra in additional_payments:
        if not extra.enabled:
            continue
        if payment_number < extra.start_payment:
            continue
        if extra.end_payment is not None and payment_number > extra.end_payment:
            continue

        if extra.type is AdditionalPaymentType.ONE_TIME:
            if payment_number == extra.start_payment:
                total += extra.amount
        elif extra.type is AdditionalPaymentType.RECURRING:
            every = extra.frequency or 1
            if (payment_number - extra.start_payment) % every == 0:
                total += extra.amount
    return total


def period_key(payment_date: date, start_date: date, reset_period: ResetPeriod) -> str:
    """Identify the limit period a payment date falls in.

    Anniversary periods are counted in whole 12-month steps from the month the
    mortgage started; the day of the month is ignored.
    """
    if reset_period is ResetPeriod.CALENDAR:
        return str(payment_date.year)
    months = (payment_date.year - start_date.year) * 12 + (payment_date.month - start_date.month)
    return f"anniversary-{months // 12}"


@dataclass
class LimitTracker:
    """Running lump-sum total for the current limit period."""

    original_principal: Decimal
    limit_percent: Decimal
    current_key: str = ""
    current_total: Decimal = Decimal("0")

    @property
    def allowance(self) -> Decimal:
        return self.original_principal * (self.limit_percent / Decimal(100))

    def check_and_accumulate(self, amount: Decimal, key: str) -> bool:
        """Add ``amount`` to the period total; return True if it is over the allowance.

        The whole period total is compared, so a small payment is flagged once
        earlier payments in the same period have used up the allowance.
        """
        if key != self.current_key:
            self.current_key = key
            self.current_total = Decimal("0")
        self.current_total += amount
        exceeds = self.current_total > self.allowance
        if exceeds:
            logger.debug(
                "Prepayments in period %s total %s, over allowance %s",
                key,
                self.current_total,
                self.allowance,
            )
        return exceeds
