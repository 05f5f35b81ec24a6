"""Output helpers for the mortgage calculator.

This module renders amortization schedules and summaries in a tabular text
format for the terminal.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import ScheduleEntry, ScheduleSummary


def print_summary(summary: ScheduleSummary) -> None:
    """Print a summary of mortgage metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Purchase price     : {summary.purchase_price:,.2f}")
    print(f"Down payment       : {summary.down_payment:,.2f} ({summary.down_payment_percent}%)")
    print(f"Mortgage amount    : {summary.mortgage_amount:,.2f}")
    if summary.premium:
        print(f"CMHC insurance     : {summary.premium:,.2f} ({summary.premium_rate * 100:.2f}%)")
    if summary.surtax:
        print(f"PST on insurance   : {summary.surtax:,.2f} ({summary.surtax_rate * 100:.2f}%)")
    if summary.additional_financing:
        print(f"Extra financing    : {summary.additional_financing:,.2f}")
    print(f"Total principal    : {summary.original_principal:,.2f}")
    print(f"Total interest     : {summary.total_interest_paid:,.2f}")
    print(f"Total paid         : {summary.total_paid:,.2f}")
    print(f"Frequency          : {summary.payment_frequency.label}")
    print(f"Payoff             : {summary.actual_payoff_months} months")
    if summary.total_additional_payments:
        print(f"Additional paid    : {summary.total_additional_payments:,.2f}")
        print(f"Interest saved     : {summary.interest_saved:,.2f}")
        print(f"Time saved         : {summary.time_saved} months")
    if summary.prepayment_limit_violations:
        print(f"Limit violations   : {summary.prepayment_limit_violations}")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the amortization schedule as a simple table.

    Payments whose additional amount is over the prepayment allowance are
    marked with ``!``.
    """
    headers = [
        "#",
        "Date",
        "Payment",
        "Principal",
        "Interest",
        "Extra",
        "Balance",
        "Rate",
        "Term",
    ]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.payment_number),
            entry.payment_date.isoformat(),
            f"{entry.payment:.2f}",
            f"{entry.principal:.2f}",
            f"{entry.interest:.2f}",
            f"{entry.additional_payment:.2f}" + ("!" if entry.exceeds_limit else ""),
            f"{entry.balance:.2f}",
            f"{entry.interest_rate * 100:.3f}%",
            str(entry.term_number),
        ]
        print("\t".join(row))
