"""Errors raised by the mortgage calculator."""

from __future__ import annotations

DOWN_PAYMENT_BELOW_MINIMUM = "down_payment_below_minimum"
NO_RENEWAL_PERIODS = "no_renewal_periods"
INVALID_VALUE = "invalid_value"


class InvalidInput(ValueError):
    """Raised when calculation inputs cannot produce a schedule.

    ``kind`` is a short machine-readable tag so callers can tell the failure
    cases apart without parsing the message.
    """

    def __init__(self, message: str, kind: str = INVALID_VALUE) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
