from dataclasses import replace
from decimal import Decimal

import pytest

from mortgage_calc.data_models import AdditionalPayment, AdditionalPaymentType
from mortgage_calc_web.app import create_app, params_to_form, parse_form_list

FORM = {
    "price": "500000",
    "down_payment": "20",
    "amortization": "25",
    "frequency": "monthly",
    "start_date": "2025-01-01",
    "terms": "1:5:5\n61:4:5",
    "extras": "one-time:10000:12",
    "limit_reset": "calendar",
}


@pytest.fixture
def client(tmp_path):
    app = create_app(f"sqlite:///{tmp_path / 'web.sqlite3'}")
    app.config["TESTING"] = True
    return app.test_client()


class TestHelpers:
    def test_parse_form_list(self):
        assert parse_form_list("1:5:5\n 61:4:5 \n\n") == ["1:5:5", "61:4:5"]
        assert parse_form_list("one-time:10,000:12") == ["one-time:10,000:12"]
        assert parse_form_list("") == []

    def test_params_to_form(self, base_params):
        form = params_to_form(base_params)
        assert form["price"] == "500000"
        assert form["terms"] == "1:5:5"
        assert form["start_date"] == "2025-01-01"
        assert form["lump_sum_limit"] == ""

    def test_params_to_form_marks_disabled_extras(self, base_params):
        params = replace(
            base_params,
            additional_payments=[
                AdditionalPayment(AdditionalPaymentType.ONE_TIME, Decimal("10000"), 12, enabled=False),
                AdditionalPayment(AdditionalPaymentType.RECURRING, Decimal("250"), 1, frequency=2),
            ],
        )
        assert params_to_form(params)["extras"] == "one-time:10000:12:off\nrecurring:250:1::2"


class TestPages:
    def test_index(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert b"Canadian Mortgage Calculator" in response.data

    def test_calculate(self, client):
        response = client.post("/", data={**FORM, "action": "run"})
        assert response.status_code == 200
        assert b"Amortization schedule" in response.data
        assert b"Interest saved" in response.data
        assert b"more rows truncated" in response.data

    def test_calculate_error(self, client):
        response = client.post("/", data={**FORM, "down_payment": "3", "action": "run"})
        assert response.status_code == 200
        assert b"at least 5%" in response.data

    def test_bad_term_syntax(self, client):
        response = client.post("/", data={**FORM, "terms": "1:5", "action": "run"})
        assert b"START:RATE:YEARS" in response.data


class TestProfiles:
    def test_save_and_share_link(self, client):
        response = client.post("/", data={**FORM, "action": "save_profile", "profile_name": "Starter home"})
        assert response.status_code == 302
        location = response.headers["Location"]
        assert "profile=" in location

        page = client.get(location)
        assert page.status_code == 200
        assert b"Starter home" in page.data
        assert b"Amortization schedule" in page.data

    def test_update_existing_profile(self, client):
        first = client.post("/", data={**FORM, "action": "save_profile", "profile_name": "A"})
        profile_id = first.headers["Location"].split("profile=")[1]
        second = client.post(
            "/", data={**FORM, "action": "save_profile", "profile_name": "B", "profile_id": profile_id}
        )
        assert second.headers["Location"].endswith(profile_id)
        page = client.get("/")
        assert page.data.count(b"?profile=") == 1

    def test_delete(self, client):
        saved = client.post("/", data={**FORM, "action": "save_profile", "profile_name": "Gone"})
        profile_id = saved.headers["Location"].split("profile=")[1]
        response = client.post(f"/profiles/{profile_id}/delete")
        assert response.status_code == 302
        assert b"Saved profile not found" in client.get(f"/?profile={profile_id}").data

    def test_resave_keeps_disabled_extra(self, client, base_params):
        store = client.application.extensions["profile_store"]
        disabled = AdditionalPayment(AdditionalPaymentType.ONE_TIME, Decimal("10000"), 12, enabled=False)
        profile = store.create_profile("Paused", replace(base_params, additional_payments=[disabled]))

        form = params_to_form(profile.params)
        form.update(profile_name=profile.name, profile_id=profile.id, action="save_profile")
        response = client.post("/", data=form)

        assert response.status_code == 302
        assert store.get_profile(profile.id).params.additional_payments == [disabled]

    def test_unknown_profile(self, client):
        assert b"Saved profile not found" in client.get("/?profile=nope").data


class TestExports:
    def test_csv(self, client):
        response = client.post("/export/csv", data=FORM)
        assert response.status_code == 200
        assert response.content_type.startswith("text/csv")
        assert response.data.startswith(b"Payment #,Date")
        assert "attachment" in response.headers["Content-Disposition"]

    def test_json(self, client):
        response = client.post("/export/json", data=FORM)
        assert response.status_code == 200
        assert response.get_json()["summary"]["total_additional_payments"] == 10000.0

    def test_extra_amount_with_thousands_separator(self, client):
        response = client.post("/export/json", data={**FORM, "extras": "one-time:10,000:12"})
        assert response.status_code == 200
        assert response.get_json()["summary"]["total_additional_payments"] == 10000.0

    def test_unknown_format(self, client):
        assert client.post("/export/xml", data=FORM).status_code == 404

    def test_export_error(self, client):
        response = client.post("/export/csv", data={**FORM, "terms": ""})
        assert response.status_code == 400
        assert b"At least one renewal period" in response.data
