"""Core calculation engine for the mortgage calculator.

This module builds amortization schedules for Canadian fixed-rate mortgages
renewed over one or more rate terms. At the start of every term the level
payment is recomputed from the balance outstanding at that point and the
number of payments left in the whole amortization. Additional payments are
applied to principal after each regular payment and, when prepayment limits
are configured, checked against the yearly lump-sum allowance.

When additional payments were made the schedule is simulated a second time
without them to measure the interest they saved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, getcontext
from typing import List, Optional, Sequence, Tuple

from .data_models import (
    AdditionalPayment,
    AmortizationSchedule,
    MortgageParams,
    PaymentFrequency,
    PrepaymentLimits,
    RenewalPeriod,
    ScheduleEntry,
    ScheduleSummary,
)
from .errors import NO_RENEWAL_PERIODS, InvalidInput
from .insurance import compute_financing
from .prepayments import LimitTracker, additional_payment_amount, period_key
from .rates import level_payment, payment_count, payments_per_year, periodic_rate
from .utils import payment_date

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal("0.01")


@dataclass
class _RunTotals:
    entries: List[ScheduleEntry] = field(default_factory=list)
    total_interest: Decimal = Decimal("0")
    total_additional: Decimal = Decimal("0")
    limit_violations: int = 0


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of ``try_compute_schedule``: either a schedule or the input error."""

    schedule: Optional[AmortizationSchedule] = None
    error: Optional[InvalidInput] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _term_ranges(periods: Sequence[RenewalPeriod], total_payments: int) -> List[Tuple[RenewalPeriod, int]]:
    """Pair each renewal period (sorted by start) with its last payment number."""
    ordered = sorted(periods, key=lambda p: p.start_payment)
    ranges = []
    for index, period in enumerate(ordered):
        if index + 1 < len(ordered):
            end = ordered[index + 1].start_payment - 1
        else:
            end = total_payments
        ranges.append((period, end))
    return ranges


def _validate(params: MortgageParams) -> None:
    if not params.renewal_periods:
        raise InvalidInput("At least one renewal period must be specified", kind=NO_RENEWAL_PERIODS)
    if params.amortization_years <= 0:
        raise InvalidInput("Amortization period must be positive")
    for period in params.renewal_periods:
        if period.start_payment < 1:
            raise InvalidInput(f"Renewal period must start at payment 1 or later, got {period.start_payment}")
        if period.annual_rate < 0:
            raise InvalidInput(f"Interest rate cannot be negative: {period.annual_rate}")
    for extra in params.additional_payments:
        if extra.amount < 0:
            raise InvalidInput(f"Additional payment amount cannot be negative: {extra.amount}")
        if extra.start_payment < 1:
            raise InvalidInput(f"Additional payment must start at payment 1 or later, got {extra.start_payment}")
        if extra.end_payment is not None and extra.end_payment < extra.start_payment:
            raise InvalidInput("Additional payment end must not precede its start")
        if extra.frequency < 1:
            raise InvalidInput("Recurring payment frequency must be at least 1")


def _amortize(
    principal: Decimal,
    terms: List[Tuple[RenewalPeriod, int]],
    frequency: PaymentFrequency,
    total_payments: int,
    start_date: date,
    additional_payments: Sequence[AdditionalPayment] = (),
    limits: Optional[PrepaymentLimits] = None,
) -> _RunTotals:
    """Run the payment-by-payment simulation across all rate terms."""
    totals = _RunTotals()
    tracker = LimitTracker(principal, limits.lump_sum_limit_percent) if limits else None
    balance = principal
    payment_number = 1

    for term_number, (term, term_end) in enumerate(terms, start=1):
        payments_in_term = term_end - term.start_payment + 1
        remaining = total_payments - payment_number + 1
        if payments_in_term <= 0 or remaining <= 0:
            logger.debug("Term %d starting at payment %d has no payments", term_number, term.start_payment)
            continue

        rate = periodic_rate(term.annual_rate, frequency)
        regular_payment = level_payment(balance, rate, remaining)
        logger.debug(
            "Term %d: payment %d, balance %.2f, rate %s, level payment %.2f over %d payments",
            term_number,
            payment_number,
            balance,
            term.annual_rate,
            regular_payment,
            remaining,
        )

        for _ in range(payments_in_term):
            if balance <= BALANCE_TOLERANCE:
                break
            interest = balance * rate
            principal_paid = min(regular_payment - interest, balance)
            balance -= principal_paid
            totals.total_interest += interest

            additional = Decimal("0")
            if additional_payments:
                additional = min(additional_payment_amount(payment_number, additional_payments), balance)
                balance -= additional
                totals.total_additional += additional

            when = payment_date(start_date, payment_number, frequency)

            exceeds = False
            if tracker is not None and additional > 0:
                key = period_key(when, start_date, limits.reset_period)
                exceeds = tracker.check_and_accumulate(additional, key)
                if exceeds:
                    totals.limit_violations += 1

            totals.entries.append(
                ScheduleEntry(
                    payment_number=payment_number,
                    payment_date=when,
                    payment=principal_paid + interest,
                    principal=principal_paid,
                    interest=interest,
                    additional_payment=additional,
                    balance=max(Decimal("0"), balance),
                    interest_rate=term.annual_rate,
                    term_number=term_number,
                    exceeds_limit=exceeds,
                )
            )
            payment_number += 1

        if balance <= BALANCE_TOLERANCE:
            logger.debug("Mortgage paid off after %d payments", payment_number - 1)
            break

    return totals


def compute_schedule(params: MortgageParams) -> AmortizationSchedule:
    """Compute the amortization schedule and summary for a mortgage.

    Parameters
    ----------
    params: MortgageParams
        Purchase, financing, rate term and prepayment inputs.

    Returns
    -------
    AmortizationSchedule
        One entry per payment until the balance is retired, plus a summary
        with insurance figures, totals and the savings from additional
        payments.

    Raises
    ------
    InvalidInput
        If no renewal period is given, the down payment is below the insured
        minimum or another input is out of range.
    """
    _validate(params)
    financing = compute_financing(
        params.purchase_price,
        params.down_payment_percent,
        params.additional_financing,
        params.insurance_surtax_rate,
    )
    principal = financing.total_principal
    frequency = params.payment_frequency
    total_payments = payment_count(params.amortization_years, frequency)
    if total_payments <= 0:
        raise InvalidInput("Amortization period is too short for a single payment")

    terms = _term_ranges(params.renewal_periods, total_payments)
    run = _amortize(
        principal,
        terms,
        frequency,
        total_payments,
        params.start_date,
        params.additional_payments,
        params.prepayment_limits,
    )

    per_year = Decimal(payments_per_year(frequency))
    actual_payoff_months = int(
        (Decimal(len(run.entries)) / per_year * 12).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    )
    original_payoff_months = int((Decimal(params.amortization_years) * 12).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    time_saved = original_payoff_months - actual_payoff_months

    interest_saved = Decimal("0")
    if run.total_additional > 0:
        baseline = _amortize(principal, terms, frequency, total_payments, params.start_date)
        interest_saved = max(Decimal("0"), baseline.total_interest - run.total_interest)
        logger.debug(
            "Interest without additional payments %.2f, with %.2f",
            baseline.total_interest,
            run.total_interest,
        )

    summary = ScheduleSummary(
        purchase_price=financing.purchase_price,
        down_payment=financing.down_payment,
        down_payment_percent=financing.down_payment_percent,
        mortgage_amount=financing.mortgage_amount,
        premium=financing.premium,
        premium_rate=financing.premium_rate,
        surtax=financing.surtax,
        surtax_rate=financing.surtax_rate,
        additional_financing=financing.additional_financing,
        original_principal=principal,
        total_interest_paid=run.total_interest,
        total_paid=principal + run.total_interest,
        total_payments=sum((e.payment for e in run.entries), Decimal("0")),
        total_additional_payments=run.total_additional,
        interest_saved=interest_saved,
        time_saved=time_saved,
        amortization_years=params.amortization_years,
        actual_payoff_months=actual_payoff_months,
        payment_frequency=frequency,
        prepayment_limit_violations=run.limit_violations if params.prepayment_limits else None,
    )
    return AmortizationSchedule(payments=run.entries, summary=summary)


def try_compute_schedule(params: MortgageParams) -> ScheduleResult:
    """Like ``compute_schedule`` but return input errors instead of raising them."""
    try:
        return ScheduleResult(schedule=compute_schedule(params))
    except InvalidInput as exc:
        return ScheduleResult(error=exc)
