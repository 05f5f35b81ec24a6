"""Printable PDF report of an amortization schedule.

The report is built as HTML and converted with WeasyPrint. ``render_report_html``
has no WeasyPrint dependency and can be used on its own.
"""

from __future__ import annotations

import html
from decimal import Decimal
from typing import List, Tuple

from .data_models import AmortizationSchedule

_PDF_CSS = """
@page {
    size: A4;
    margin: 18mm 14mm 18mm 14mm;
    @bottom-center {
        content: "Page " counter(page) " of " counter(pages);
        font-size: 8pt;
        color: #6a7a90;
    }
}

body {
    font-family: Arial, Helvetica, sans-serif;
    font-size: 10pt;
    color: #1a2340;
}

h1 { font-size: 18pt; margin: 0 0 12px 0; }

h2 {
    font-size: 12pt;
    border-bottom: 1px solid #d0d8e8;
    padding-bottom: 3px;
    margin: 14px 0 6px 0;
}

ul.details { list-style: none; padding: 0; margin: 0; }
ul.details li { padding: 1px 0; }

table {
    width: 100%;
    border-collapse: collapse;
    font-size: 7pt;
    margin-top: 10px;
}

th {
    background: #428bca;
    color: #fff;
    padding: 3px 4px;
}

td { padding: 2px 4px; text-align: right; }
td.center { text-align: center; }
tr:nth-child(even) td { background: #f4f7fb; }
tr.over-limit td { color: #c0392b; }
"""


def _money(val: Decimal) -> str:
    return f"${val:,.2f}"


def _section(title: str, lines: List[str]) -> str:
    items = "".join(f"<li>{html.escape(line)}</li>" for line in lines)
    return f"<h2>{html.escape(title)}</h2><ul class='details'>{items}</ul>"


def _report_sections(schedule: AmortizationSchedule) -> List[Tuple[str, List[str]]]:
    s = schedule.summary
    details = [
        f"Purchase Price: {_money(s.purchase_price)}",
        f"Down Payment ({s.down_payment_percent}%): {_money(s.down_payment)}",
        f"Mortgage Amount: {_money(s.mortgage_amount)}",
    ]
    if s.premium > 0:
        details.append(f"CMHC Insurance ({s.premium_rate * 100:.2f}%): {_money(s.premium)}")
    if s.surtax > 0:
        details.append(f"PST on CMHC ({s.surtax_rate * 100:.2f}%): {_money(s.surtax)}")
    if s.additional_financing > 0:
        details.append(f"Additional Financing: {_money(s.additional_financing)}")
    details.append(f"Total Principal: {_money(s.original_principal)}")

    first_date = schedule.payments[0].payment_date.isoformat() if schedule.payments else "-"
    payment_summary = [
        f"Total Interest Paid: {_money(s.total_interest_paid)}",
        f"Total Amount Paid: {_money(s.total_paid)}",
        f"Amortization Period: {s.amortization_years} years",
        f"Payment Frequency: {s.payment_frequency.label}",
        f"Total Payments: {len(schedule.payments)}",
        f"First Payment Date: {first_date}",
    ]
    sections = [("Purchase Details", details), ("Payment Summary", payment_summary)]

    if s.total_additional_payments > 0:
        savings = [
            f"Total Additional Payments: {_money(s.total_additional_payments)}",
            f"Interest Saved: {_money(s.interest_saved)}",
            f"Time Saved: {s.time_saved} months",
            f"Actual Payoff: {s.actual_payoff_months} months",
        ]
        if s.prepayment_limit_violations:
            savings.append(f"Payments Over Prepayment Limit: {s.prepayment_limit_violations}")
        sections.append(("Additional Payment Savings", savings))
    return sections


def render_report_html(schedule: AmortizationSchedule) -> str:
    """Return the full report as a standalone HTML document."""
    parts = [
        "<html><head><meta charset='utf-8'>",
        f"<style>{_PDF_CSS}</style>",
        "<title>Canadian Mortgage Amortization Schedule</title></head><body>",
        "<h1>Canadian Mortgage Amortization Schedule</h1>",
    ]
    for title, lines in _report_sections(schedule):
        parts.append(_section(title, lines))

    parts.append("<table><thead><tr>")
    for header in ["#", "Date", "Payment", "Principal", "Interest", "Additional", "Balance", "Rate", "Term"]:
        parts.append(f"<th>{header}</th>")
    parts.append("</tr></thead><tbody>")
    for p in schedule.payments:
        extra = _money(p.additional_payment) if p.additional_payment > 0 else "-"
        row_class = " class='over-limit'" if p.exceeds_limit else ""
        parts.append(
            f"<tr{row_class}>"
            f"<td class='center'>{p.payment_number}</td>"
            f"<td class='center'>{p.payment_date.isoformat()}</td>"
            f"<td>{_money(p.payment)}</td>"
            f"<td>{_money(p.principal)}</td>"
            f"<td>{_money(p.interest)}</td>"
            f"<td>{extra}</td>"
            f"<td>{_money(p.balance)}</td>"
            f"<td>{p.interest_rate * 100:.3f}%</td>"
            f"<td class='center'>{p.term_number}</td>"
            "</tr>"
        )
    parts.append("</tbody></table></body></html>")
    return "".join(parts)


def build_pdf_report(schedule: AmortizationSchedule) -> bytes:
    """Generate the PDF report.

    Returns
    -------
    bytes
        PDF file content.
    """
    try:
        from weasyprint import HTML
    except ImportError as exc:
        raise RuntimeError(
            "weasyprint is required for PDF export. "
            "Install it with: pip install 'mortgage-calc[pdf]'"
        ) from exc

    return HTML(string=render_report_html(schedule)).write_pdf()
