import json
from decimal import Decimal

import click
import pytest
from click.testing import CliRunner

from mortgage_calc.data_models import AdditionalPaymentType, PaymentFrequency, ResetPeriod
from mortgage_calc.main import (
    build_params_from_options,
    cli,
    parse_amount,
    parse_extra_payment_strings,
    parse_term_strings,
)

BASE_ARGS = [
    "--price", "500k",
    "--down-payment", "20",
    "--start-date", "2025-01-01",
    "--term", "1:5:5",
]


class TestParsing:
    def test_amount_suffixes(self):
        assert parse_amount("500k") == Decimal("500000")
        assert parse_amount("1.2m") == Decimal("1200000")
        assert parse_amount("12,500") == Decimal("12500")

    def test_invalid_amount(self):
        with pytest.raises(click.BadParameter):
            parse_amount("lots")

    def test_terms(self):
        terms = parse_term_strings(("1:5.25%:5", "61:4:3"))
        assert terms[0].annual_rate == Decimal("0.0525")
        assert terms[1].start_payment == 61
        assert terms[1].term_years == Decimal("3")

    def test_bad_term(self):
        with pytest.raises(click.BadParameter):
            parse_term_strings(("1:5",))

    def test_extras(self):
        one_time, recurring, open_ended = parse_extra_payment_strings(
            ("one-time:10k:12", "recurring:500:1:120:2", "recurring:200:13")
        )
        assert one_time.type is AdditionalPaymentType.ONE_TIME
        assert one_time.amount == Decimal("10000")
        assert recurring.end_payment == 120
        assert recurring.frequency == 2
        assert open_ended.end_payment is None
        assert open_ended.frequency == 1

    def test_disabled_extras(self):
        one_time, recurring, enabled = parse_extra_payment_strings(
            ("one-time:5000:12:off", "recurring:250:1::2:off", "recurring:250:1:60:2:on")
        )
        assert one_time.enabled is False
        assert one_time.start_payment == 12
        assert recurring.enabled is False
        assert recurring.end_payment is None
        assert recurring.frequency == 2
        assert enabled.enabled is True
        assert enabled.end_payment == 60

    def test_bad_extra_type(self):
        with pytest.raises(click.BadParameter):
            parse_extra_payment_strings(("weekly:100:1",))

    def test_build_params(self):
        params = build_params_from_options(
            "625000", "10", "25", "bi-weekly", "2025-01-01", ("1:5:5",),
            surtax_rate="8", lump_sum_limit="15", limit_reset="anniversary",
        )
        assert params.payment_frequency is PaymentFrequency.BIWEEKLY
        assert params.insurance_surtax_rate == Decimal("0.08")
        assert params.prepayment_limits.lump_sum_limit_percent == Decimal("15")
        assert params.prepayment_limits.reset_period is ResetPeriod.ANNIVERSARY


class TestCommands:
    def test_schedule_prints_summary_and_rows(self):
        result = CliRunner().invoke(cli, ["schedule", *BASE_ARGS])
        assert result.exit_code == 0, result.output
        assert "Summary" in result.output
        assert "showing first 120 rows" in result.output

    def test_summary(self):
        result = CliRunner().invoke(cli, ["summary", *BASE_ARGS, "--extra", "one-time:10000:12"])
        assert result.exit_code == 0, result.output
        assert "Interest saved" in result.output

    def test_export_json(self, tmp_path):
        path = tmp_path / "out.json"
        result = CliRunner().invoke(cli, ["schedule", *BASE_ARGS, "--output", str(path)])
        assert result.exit_code == 0, result.output
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data["payments"]) == 300

    def test_export_csv(self, tmp_path):
        path = tmp_path / "out.csv"
        result = CliRunner().invoke(cli, ["schedule", *BASE_ARGS, "--output", str(path)])
        assert result.exit_code == 0, result.output
        assert path.read_text(encoding="utf-8").startswith("Payment #,Date")

    def test_unsupported_output(self, tmp_path):
        result = CliRunner().invoke(cli, ["schedule", *BASE_ARGS, "--output", str(tmp_path / "out.xml")])
        assert result.exit_code != 0

    def test_down_payment_below_minimum(self):
        args = ["summary", "--price", "400000", "--down-payment", "3", "--start-date", "2025-01-01", "--term", "1:5:5"]
        result = CliRunner().invoke(cli, args)
        assert result.exit_code == 1
        assert "at least 5%" in result.output
