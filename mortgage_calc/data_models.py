"""Data models for the mortgage calculator.

This module defines the value objects used by the calculator: renewal
periods (rate terms), additional payments, prepayment privilege limits, the
overall mortgage parameters and the schedule produced by the engine. Input
objects are frozen dataclasses; edit them with ``dataclasses.replace`` so the
same instance can be shared safely between calculations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import InvalidInput


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    BIWEEKLY = "bi-weekly"
    WEEKLY = "weekly"
    ACCELERATED_BIWEEKLY = "accelerated-bi-weekly"

    @property
    def label(self) -> str:
        return {
            PaymentFrequency.MONTHLY: "Monthly",
            PaymentFrequency.BIWEEKLY: "Bi-Weekly",
            PaymentFrequency.WEEKLY: "Weekly",
            PaymentFrequency.ACCELERATED_BIWEEKLY: "Accelerated Bi-Weekly",
        }[self]


class AdditionalPaymentType(str, Enum):
    ONE_TIME = "one-time"
    RECURRING = "recurring"


class ResetPeriod(str, Enum):
    CALENDAR = "calendar"
    ANNIVERSARY = "anniversary"


def _dec(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except Exception as exc:
        raise InvalidInput(f"Invalid numeric value: {value!r}") from exc


@dataclass(frozen=True)
class RenewalPeriod:
    """A contiguous span of payments sharing one fixed annual rate.

    Attributes
    ----------
    start_payment: int
        1-based payment number at which this term begins.
    annual_rate: Decimal
        Nominal annual rate as a fraction (``Decimal("0.05")`` is 5 %).
    term_years: Decimal
        Nominal length of the term. Informational only; the term actually
        runs until the next renewal period starts.
    """

    start_payment: int
    annual_rate: Decimal
    term_years: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_payment": self.start_payment,
            "annual_rate": str(self.annual_rate),
            "term_years": str(self.term_years),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenewalPeriod":
        return cls(
            start_payment=int(data["start_payment"]),
            annual_rate=_dec(data["annual_rate"]),
            term_years=_dec(data.get("term_years", 5)),
        )


@dataclass(frozen=True)
class AdditionalPayment:
    """An extra payment applied directly to principal.

    A ``one-time`` payment fires only at ``start_payment``. A ``recurring``
    payment fires at ``start_payment`` and every ``frequency`` payments after
    it, up to and including ``end_payment`` when one is set.
    """

    type: AdditionalPaymentType
    amount: Decimal
    start_payment: int
    end_payment: Optional[int] = None
    frequency: int = 1  # every N payments, recurring only
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "amount": str(self.amount),
            "start_payment": self.start_payment,
            "end_payment": self.end_payment,
            "frequency": self.frequency,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdditionalPayment":
        end = data.get("end_payment")
        return cls(
            type=AdditionalPaymentType(data["type"]),
            amount=_dec(data["amount"]),
            start_payment=int(data["start_payment"]),
            end_payment=int(end) if end not in (None, "") else None,
            frequency=int(data.get("frequency") or 1),
            enabled=bool(data.get("enabled", True)),
        )


@dataclass(frozen=True)
class PrepaymentLimits:
    """Contractual prepayment privileges.

    Only ``lump_sum_limit_percent`` is checked by the engine.
    ``payment_increase_limit_percent`` is carried for display and storage.
    """

    lump_sum_limit_percent: Decimal
    payment_increase_limit_percent: Decimal = Decimal("0")
    reset_period: ResetPeriod = ResetPeriod.CALENDAR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lump_sum_limit_percent": str(self.lump_sum_limit_percent),
            "payment_increase_limit_percent": str(self.payment_increase_limit_percent),
            "reset_period": self.reset_period.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrepaymentLimits":
        return cls(
            lump_sum_limit_percent=_dec(data["lump_sum_limit_percent"]),
            payment_increase_limit_percent=_dec(data.get("payment_increase_limit_percent", 0)),
            reset_period=ResetPeriod(data.get("reset_period", ResetPeriod.CALENDAR.value)),
        )


@dataclass(frozen=True)
class MortgageParams:
    """All inputs of one calculation.

    The financed principal is not an input: it is derived from the purchase
    price, down payment, insurance premium, surtax and extra financing.
    """

    purchase_price: Decimal
    down_payment_percent: Decimal
    amortization_years: Decimal
    payment_frequency: PaymentFrequency
    start_date: date  # first payment date
    renewal_periods: List[RenewalPeriod]
    additional_financing: Decimal = Decimal("0")
    insurance_surtax_rate: Decimal = Decimal("0")  # fraction, e.g. 0.08
    additional_payments: List[AdditionalPayment] = field(default_factory=list)
    prepayment_limits: Optional[PrepaymentLimits] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "purchase_price": str(self.purchase_price),
            "down_payment_percent": str(self.down_payment_percent),
            "additional_financing": str(self.additional_financing),
            "insurance_surtax_rate": str(self.insurance_surtax_rate),
            "amortization_years": str(self.amortization_years),
            "payment_frequency": self.payment_frequency.value,
            "start_date": self.start_date.isoformat(),
            "renewal_periods": [p.to_dict() for p in self.renewal_periods],
            "additional_payments": [p.to_dict() for p in self.additional_payments],
            "prepayment_limits": self.prepayment_limits.to_dict() if self.prepayment_limits else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MortgageParams":
        limits = data.get("prepayment_limits")
        try:
            start = date.fromisoformat(data["start_date"])
            frequency = PaymentFrequency(data["payment_frequency"])
        except (KeyError, ValueError) as exc:
            raise InvalidInput(f"Invalid mortgage parameters: {exc}") from exc
        return cls(
            purchase_price=_dec(data["purchase_price"]),
            down_payment_percent=_dec(data["down_payment_percent"]),
            additional_financing=_dec(data.get("additional_financing", 0)),
            insurance_surtax_rate=_dec(data.get("insurance_surtax_rate", 0)),
            amortization_years=_dec(data["amortization_years"]),
            payment_frequency=frequency,
            start_date=start,
            renewal_periods=[RenewalPeriod.from_dict(p) for p in data.get("renewal_periods", [])],
            additional_payments=[AdditionalPayment.from_dict(p) for p in data.get("additional_payments", [])],
            prepayment_limits=PrepaymentLimits.from_dict(limits) if limits else None,
        )


@dataclass(frozen=True)
class FinancingDetails:
    """Result of the insurance calculation."""

    purchase_price: Decimal
    down_payment_percent: Decimal
    down_payment: Decimal
    mortgage_amount: Decimal
    premium_rate: Decimal
    premium: Decimal
    surtax_rate: Decimal
    surtax: Decimal
    additional_financing: Decimal
    total_principal: Decimal


@dataclass(frozen=True)
class ScheduleEntry:
    """One payment of the amortization schedule.

    ``payment`` is always ``principal + interest``. The additional payment is
    applied after the regular payment and is not part of ``payment``.
    ``exceeds_limit`` is only ever True when prepayment limits are configured
    and the running total for the limit period is over the allowance.
    """

    payment_number: int
    payment_date: date
    payment: Decimal
    principal: Decimal
    interest: Decimal
    additional_payment: Decimal
    balance: Decimal
    interest_rate: Decimal
    term_number: int
    exceeds_limit: bool = False


@dataclass(frozen=True)
class ScheduleSummary:
    purchase_price: Decimal
    down_payment: Decimal
    down_payment_percent: Decimal
    mortgage_amount: Decimal
    premium: Decimal
    premium_rate: Decimal
    surtax: Decimal
    surtax_rate: Decimal
    additional_financing: Decimal
    original_principal: Decimal
    total_interest_paid: Decimal
    total_paid: Decimal
    total_payments: Decimal
    total_additional_payments: Decimal
    interest_saved: Decimal
    time_saved: int  # months
    amortization_years: Decimal
    actual_payoff_months: int
    payment_frequency: PaymentFrequency
    prepayment_limit_violations: Optional[int] = None


@dataclass(frozen=True)
class AmortizationSchedule:
    payments: List[ScheduleEntry]
    summary: ScheduleSummary

    @property
    def total_interest(self) -> Decimal:
        return self.summary.total_interest_paid

    @property
    def total_principal(self) -> Decimal:
        return self.summary.original_principal
