"""Utility functions for the mortgage calculator.

This module provides helpers for parsing user input into Python data types and
for placing payments on the calendar.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal, getcontext

from .data_models import PaymentFrequency

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

AVERAGE_DAYS_PER_MONTH = Decimal("30.44")


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` (or ``YYYY-MM``) string into a ``date``.

    A missing day component means the first day of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) == 2:
            return date(int(parts[0]), int(parts[1]), 1)
        if len(parts) != 3:
            raise ValueError
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except Exception as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        return Decimal(cleaned)
    except Exception as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def days_for_payment(payment_number: int, frequency: PaymentFrequency) -> int:
    """Return the day offset of a payment from the first payment date.

    Monthly payments step an average 30.44 days rather than whole calendar
    months, so dates drift by a day or two against the calendar over long
    amortizations.
    """
    steps = payment_number - 1
    if frequency is PaymentFrequency.MONTHLY:
        days = (steps * AVERAGE_DAYS_PER_MONTH).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return int(days)
    if frequency is PaymentFrequency.WEEKLY:
        return steps * 7
    return steps * 14


def payment_date(start_date: date, payment_number: int, frequency: PaymentFrequency) -> date:
    return start_date + timedelta(days=days_for_payment(payment_number, frequency))
