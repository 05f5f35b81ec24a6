"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules or view summaries.
Results can be printed to the terminal or exported to JSON, CSV or PDF files.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

import click

from .data_models import (
    AdditionalPayment,
    AdditionalPaymentType,
    MortgageParams,
    PaymentFrequency,
    PrepaymentLimits,
    RenewalPeriod,
    ResetPeriod,
)
from .engine import compute_schedule
from .errors import InvalidInput
from .exporters import export_to_csv, export_to_json
from .formatter import print_schedule, print_summary
from .pdf_report import build_pdf_report
from .utils import decimal_from_str, parse_date

FREQUENCY_CHOICES = [f.value for f in PaymentFrequency]
MAX_PRINTED_ROWS = 120


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000).
    """
    value = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        return decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string ("5.25" or "5.25%") into percentage points."""
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    try:
        return decimal_from_str(value)
    except ValueError:
        raise click.BadParameter(f"Invalid percentage: {value}")


def parse_term_strings(values: Tuple[str, ...]) -> List[RenewalPeriod]:
    terms: List[RenewalPeriod] = []
    for item in values:
        parts = item.split(":")
        if len(parts) != 3:
            raise click.BadParameter(f"Term must be in START:RATE:YEARS format; got {item}")
        start_str, rate_str, years_str = parts
        try:
            start = int(start_str)
            years = decimal_from_str(years_str)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        rate = parse_percent(rate_str) / Decimal(100)
        terms.append(RenewalPeriod(start_payment=start, annual_rate=rate, term_years=years))
    return terms


def parse_extra_payment_strings(values: Tuple[str, ...]) -> List[AdditionalPayment]:
    """Parse ``one-time:AMOUNT:START`` and ``recurring:AMOUNT:START[:END[:EVERY]]``.

    A trailing ``:off`` keeps the payment but disables it.
    """
    extras: List[AdditionalPayment] = []
    for item in values:
        parts = item.split(":")
        enabled = True
        if len(parts) > 3 and parts[-1].strip().lower() in ("on", "off"):
            enabled = parts.pop().strip().lower() == "on"
        if len(parts) < 3:
            raise click.BadParameter(
                f"Additional payment must be in TYPE:AMOUNT:START[:END[:EVERY]] format; got {item}"
            )
        try:
            kind = AdditionalPaymentType(parts[0].strip().lower())
        except ValueError:
            raise click.BadParameter(
                f"Additional payment type must be 'one-time' or 'recurring'; got {parts[0]}"
            )
        amount = parse_amount(parts[1])
        try:
            start = int(parts[2])
            end = int(parts[3]) if len(parts) > 3 and parts[3].strip() else None
            every = int(parts[4]) if len(parts) > 4 and parts[4].strip() else 1
        except ValueError:
            raise click.BadParameter(f"Invalid payment number in {item}")
        if kind is AdditionalPaymentType.ONE_TIME and len(parts) > 3:
            raise click.BadParameter(f"One-time payment takes no end or interval; got {item}")
        extras.append(
            AdditionalPayment(
                type=kind,
                amount=amount,
                start_payment=start,
                end_payment=end,
                frequency=every,
                enabled=enabled,
            )
        )
    return extras


def build_params_from_options(
    price: str,
    down_payment: str,
    amortization: str,
    frequency: str,
    start_date: str,
    term: Tuple[str, ...],
    extra: Tuple[str, ...] = (),
    extra_financing: Optional[str] = None,
    surtax_rate: Optional[str] = None,
    lump_sum_limit: Optional[str] = None,
    payment_increase_limit: Optional[str] = None,
    limit_reset: str = ResetPeriod.CALENDAR.value,
) -> MortgageParams:
    try:
        start_dt = parse_date(start_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    try:
        years = decimal_from_str(amortization)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    try:
        payment_frequency = PaymentFrequency(frequency)
    except ValueError:
        raise click.BadParameter(f"Payment frequency must be one of {', '.join(FREQUENCY_CHOICES)}")

    limits = None
    if lump_sum_limit:
        try:
            reset_period = ResetPeriod(limit_reset)
        except ValueError:
            raise click.BadParameter("Limit reset must be 'calendar' or 'anniversary'")
        limits = PrepaymentLimits(
            lump_sum_limit_percent=parse_percent(lump_sum_limit),
            payment_increase_limit_percent=parse_percent(payment_increase_limit or "0"),
            reset_period=reset_period,
        )

    return MortgageParams(
        purchase_price=parse_amount(price),
        down_payment_percent=parse_percent(down_payment),
        additional_financing=parse_amount(extra_financing) if extra_financing else Decimal("0"),
        insurance_surtax_rate=parse_percent(surtax_rate) / Decimal(100) if surtax_rate else Decimal("0"),
        amortization_years=years,
        payment_frequency=payment_frequency,
        start_date=start_dt,
        renewal_periods=parse_term_strings(term),
        additional_payments=parse_extra_payment_strings(extra) if extra else [],
        prepayment_limits=limits,
    )


def mortgage_options(func):
    """Attach the shared mortgage input options to a command."""
    options = [
        click.option("--price", "-p", "price", required=True, help="Purchase price"),
        click.option("--down-payment", "-d", "down_payment", required=True, help="Down payment (percent of price)"),
        click.option("--amortization", "-a", "amortization", default="25", show_default=True, help="Amortization in years"),
        click.option(
            "--frequency",
            "-f",
            "frequency",
            type=click.Choice(FREQUENCY_CHOICES),
            default=PaymentFrequency.MONTHLY.value,
            show_default=True,
            help="Payment frequency",
        ),
        click.option("--start-date", "-s", "start_date", required=True, help="First payment date (YYYY-MM-DD)"),
        click.option("--term", "term", multiple=True, required=True, help="Rate term in START:RATE:YEARS format, e.g. 1:5.25:5"),
        click.option(
            "--extra",
            "extra",
            multiple=True,
            help="Additional payment: one-time:AMOUNT:START or recurring:AMOUNT:START[:END[:EVERY]], append :off to disable",
        ),
        click.option("--extra-financing", "extra_financing", help="Additional financing added to the principal"),
        click.option("--surtax-rate", "surtax_rate", help="Provincial tax on the insurance premium (percent)"),
        click.option("--lump-sum-limit", "lump_sum_limit", help="Yearly lump-sum prepayment limit (percent of principal)"),
        click.option("--payment-increase-limit", "payment_increase_limit", help="Payment increase limit (percent)"),
        click.option(
            "--limit-reset",
            "limit_reset",
            type=click.Choice([r.value for r in ResetPeriod]),
            default=ResetPeriod.CALENDAR.value,
            show_default=True,
            help="When prepayment limits reset",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _compute(**options):
    params = build_params_from_options(**options)
    try:
        return compute_schedule(params)
    except InvalidInput as exc:
        raise click.ClickException(exc.message)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log calculation details")
def cli(verbose: bool) -> None:
    """A command-line Canadian mortgage calculator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@mortgage_options
@click.option("--output", "-o", "output", type=str, help="Output file path (.json, .csv or .pdf)")
@click.option("--all-rows", "all_rows", is_flag=True, help="Print every row instead of the first 120")
def schedule(output: Optional[str], all_rows: bool, **options) -> None:
    """Compute and print the full amortization schedule."""
    result = _compute(**options)
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".json":
            export_to_json(path, result)
        elif suffix == ".csv":
            export_to_csv(path, result)
        elif suffix == ".pdf":
            try:
                path.write_bytes(build_pdf_report(result))
            except RuntimeError as exc:
                raise click.ClickException(str(exc))
        else:
            raise click.BadParameter("Unsupported output format; use .json, .csv or .pdf")
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(result.summary)
    rows = result.payments
    if not all_rows and len(rows) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        rows = rows[:MAX_PRINTED_ROWS]
    print_schedule(rows)


@cli.command()
@mortgage_options
def summary(**options) -> None:
    """Compute and print only the summary metrics for a mortgage."""
    result = _compute(**options)
    print_summary(result.summary)


if __name__ == "__main__":
    cli()
