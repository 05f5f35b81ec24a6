"""Serialization of amortization schedules to CSV and JSON."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Dict

from .data_models import AmortizationSchedule, ScheduleEntry, ScheduleSummary

CSV_HEADER = [
    "Payment #",
    "Date",
    "Payment",
    "Principal",
    "Interest",
    "Additional Payment",
    "Balance",
    "Interest Rate",
    "Term",
]


def entry_to_dict(entry: ScheduleEntry) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "payment_number": entry.payment_number,
        "payment_date": entry.payment_date.isoformat(),
        "payment": float(entry.payment),
        "principal": float(entry.principal),
        "interest": float(entry.interest),
        "additional_payment": float(entry.additional_payment),
        "balance": float(entry.balance),
        "interest_rate": float(entry.interest_rate),
        "term_number": entry.term_number,
    }
    if entry.exceeds_limit:
        data["exceeds_limit"] = True
    return data


def summary_to_dict(summary: ScheduleSummary) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "purchase_price": float(summary.purchase_price),
        "down_payment": float(summary.down_payment),
        "down_payment_percent": float(summary.down_payment_percent),
        "mortgage_amount": float(summary.mortgage_amount),
        "cmhc_insurance": float(summary.premium),
        "cmhc_premium_rate": float(summary.premium_rate),
        "cmhc_pst": float(summary.surtax),
        "cmhc_pst_rate": float(summary.surtax_rate),
        "additional_financing": float(summary.additional_financing),
        "original_principal": float(summary.original_principal),
        "total_interest_paid": float(summary.total_interest_paid),
        "total_paid": float(summary.total_paid),
        "total_payments": float(summary.total_payments),
        "total_additional_payments": float(summary.total_additional_payments),
        "interest_saved": float(summary.interest_saved),
        "time_saved": summary.time_saved,
        "amortization_years": float(summary.amortization_years),
        "actual_payoff_months": summary.actual_payoff_months,
        "payment_frequency": summary.payment_frequency.value,
    }
    if summary.prepayment_limit_violations is not None:
        data["prepayment_limit_violations"] = summary.prepayment_limit_violations
    return data


def schedule_to_dict(schedule: AmortizationSchedule) -> Dict[str, Any]:
    return {
        "payments": [entry_to_dict(e) for e in schedule.payments],
        "total_interest": float(schedule.total_interest),
        "total_principal": float(schedule.total_principal),
        "total_payments": float(schedule.summary.total_payments),
        "summary": summary_to_dict(schedule.summary),
    }


def schedule_to_json(schedule: AmortizationSchedule) -> str:
    return json.dumps(schedule_to_dict(schedule), indent=2)


def schedule_to_csv(schedule: AmortizationSchedule) -> str:
    """Render the schedule as CSV text, one row per payment."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for e in schedule.payments:
        writer.writerow(
            [
                e.payment_number,
                e.payment_date.isoformat(),
                f"{e.payment:.2f}",
                f"{e.principal:.2f}",
                f"{e.interest:.2f}",
                f"{e.additional_payment:.2f}",
                f"{e.balance:.2f}",
                f"{e.interest_rate * 100:.3f}%",
                e.term_number,
            ]
        )
    return buffer.getvalue()


def export_to_json(path: Path, schedule: AmortizationSchedule) -> None:
    """Export schedule and summary to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        f.write(schedule_to_json(schedule))


def export_to_csv(path: Path, schedule: AmortizationSchedule) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(schedule_to_csv(schedule))
