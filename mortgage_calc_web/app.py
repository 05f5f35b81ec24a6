import logging
import os
from typing import Dict, Optional

import click
from flask import Flask, Response, abort, redirect, render_template, request, url_for

from mortgage_calc.data_models import AdditionalPaymentType, MortgageParams, PaymentFrequency, ResetPeriod
from mortgage_calc.engine import try_compute_schedule
from mortgage_calc.errors import InvalidInput
from mortgage_calc.exporters import schedule_to_csv, schedule_to_json
from mortgage_calc.main import MAX_PRINTED_ROWS, build_params_from_options
from mortgage_calc.pdf_report import build_pdf_report
from mortgage_calc_web.profile_store import create_store_from_env

logger = logging.getLogger(__name__)

DEFAULT_FORM = {
    "price": "500000",
    "down_payment": "20",
    "extra_financing": "",
    "surtax_rate": "",
    "amortization": "25",
    "frequency": PaymentFrequency.MONTHLY.value,
    "start_date": "",
    "terms": "1:5:5",
    "extras": "",
    "lump_sum_limit": "",
    "payment_increase_limit": "",
    "limit_reset": ResetPeriod.CALENDAR.value,
    "profile_name": "",
    "profile_id": "",
}

EXPORT_FORMATS = {
    "csv": ("text/csv", "amortization-schedule.csv"),
    "json": ("application/json", "amortization-schedule.json"),
    "pdf": ("application/pdf", "mortgage-amortization-schedule.pdf"),
}


def parse_form_list(value: str) -> list[str]:
    """Parse a newline separated list of entries from a form field.

    Returns a list of trimmed strings, skipping any empty entries. Commas are
    left alone since amounts may carry thousands separators.
    """
    if not value:
        return []
    parts = [p.strip() for p in value.splitlines()]
    return [p for p in parts if p]


def _plain(value) -> str:
    return f"{value.normalize():f}"


def params_to_form(params: MortgageParams) -> Dict[str, str]:
    """Render stored parameters back into the form's text syntax."""
    terms = [
        f"{p.start_payment}:{_plain(p.annual_rate * 100)}:{_plain(p.term_years)}" for p in params.renewal_periods
    ]
    extras = []
    for e in params.additional_payments:
        if e.type is AdditionalPaymentType.ONE_TIME:
            line = f"one-time:{_plain(e.amount)}:{e.start_payment}"
        else:
            end = e.end_payment if e.end_payment is not None else ""
            line = f"recurring:{_plain(e.amount)}:{e.start_payment}:{end}:{e.frequency}"
        if not e.enabled:
            line += ":off"
        extras.append(line)
    limits = params.prepayment_limits
    form = dict(DEFAULT_FORM)
    form.update(
        price=_plain(params.purchase_price),
        down_payment=_plain(params.down_payment_percent),
        extra_financing=_plain(params.additional_financing) if params.additional_financing else "",
        surtax_rate=_plain(params.insurance_surtax_rate * 100) if params.insurance_surtax_rate else "",
        amortization=_plain(params.amortization_years),
        frequency=params.payment_frequency.value,
        start_date=params.start_date.isoformat(),
        terms="\n".join(terms),
        extras="\n".join(extras),
        lump_sum_limit=_plain(limits.lump_sum_limit_percent) if limits else "",
        payment_increase_limit=_plain(limits.payment_increase_limit_percent) if limits else "",
        limit_reset=limits.reset_period.value if limits else ResetPeriod.CALENDAR.value,
    )
    return form


def _form_to_params(form) -> MortgageParams:
    return build_params_from_options(
        form.get("price", "").strip(),
        form.get("down_payment", "").strip(),
        form.get("amortization", "25").strip(),
        form.get("frequency", PaymentFrequency.MONTHLY.value),
        form.get("start_date", "").strip(),
        tuple(parse_form_list(form.get("terms", ""))),
        tuple(parse_form_list(form.get("extras", ""))),
        form.get("extra_financing", "").strip() or None,
        form.get("surtax_rate", "").strip() or None,
        form.get("lump_sum_limit", "").strip() or None,
        form.get("payment_increase_limit", "").strip() or None,
        form.get("limit_reset", ResetPeriod.CALENDAR.value),
    )


def create_app(database_url: Optional[str] = None) -> Flask:
    app = Flask(__name__)
    app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    store = create_store_from_env(database_url or os.environ.get("MORTGAGE_DATABASE_URL"))
    app.extensions["profile_store"] = store

    def _render(form: Dict[str, str], schedule=None, error: Optional[str] = None, show_full_schedule: bool = False):
        rows = []
        truncated = 0
        if schedule is not None:
            rows = schedule.payments
            if not show_full_schedule and len(rows) > MAX_PRINTED_ROWS:
                truncated = len(rows) - MAX_PRINTED_ROWS
                rows = rows[:MAX_PRINTED_ROWS]
        return render_template(
            "index.html",
            form=form,
            schedule=schedule,
            rows=rows,
            truncated=truncated,
            show_full_schedule=show_full_schedule,
            error=error,
            profiles=store.list_profiles(),
            frequencies=list(PaymentFrequency),
            reset_periods=list(ResetPeriod),
        )

    def _calculate(form):
        try:
            params = _form_to_params(form)
        except (click.BadParameter, InvalidInput) as exc:
            return None, None, str(exc)
        result = try_compute_schedule(params)
        if not result.ok:
            return params, None, result.error.message
        return params, result.schedule, None

    @app.get("/")
    def index():
        profile_id = request.args.get("profile", "")
        if not profile_id:
            return _render(dict(DEFAULT_FORM))
        profile = store.get_profile(profile_id)
        if profile is None:
            return _render(dict(DEFAULT_FORM), error="Saved profile not found")
        form = params_to_form(profile.params)
        form.update(profile_name=profile.name, profile_id=profile.id)
        result = try_compute_schedule(profile.params)
        return _render(form, schedule=result.schedule, error=None if result.ok else result.error.message)

    @app.post("/")
    def calculate():
        form = dict(DEFAULT_FORM)
        form.update({k: v for k, v in request.form.items() if k in DEFAULT_FORM})
        show_full_schedule = request.form.get("show_full_schedule") == "1"
        action = request.form.get("action", "run")
        params, schedule, error = _calculate(request.form)

        if action == "save_profile" and params is not None and error is None:
            name = form["profile_name"].strip() or "Mortgage"
            profile = None
            if form["profile_id"]:
                profile = store.update_profile(form["profile_id"], name=name, params=params)
            if profile is None:
                profile = store.create_profile(name, params)
            return redirect(url_for("index", profile=profile.id))

        return _render(form, schedule=schedule, error=error, show_full_schedule=show_full_schedule)

    @app.post("/profiles/<profile_id>/delete")
    def delete_profile(profile_id: str):
        store.delete_profile(profile_id)
        return redirect(url_for("index"))

    @app.post("/export/<fmt>")
    def export(fmt: str):
        if fmt not in EXPORT_FORMATS:
            abort(404)
        _, schedule, error = _calculate(request.form)
        if error:
            form = dict(DEFAULT_FORM)
            form.update({k: v for k, v in request.form.items() if k in DEFAULT_FORM})
            return _render(form, error=error), 400

        mimetype, filename = EXPORT_FORMATS[fmt]
        if fmt == "csv":
            body = schedule_to_csv(schedule)
        elif fmt == "json":
            body = schedule_to_json(schedule)
        else:
            try:
                body = build_pdf_report(schedule)
            except RuntimeError as exc:
                logger.warning("PDF export unavailable: %s", exc)
                abort(501, description=str(exc))
        return Response(
            body,
            mimetype=mimetype,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    return app


if __name__ == "__main__":
    print("Starting Mortgage Calculator web app...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
