import pytest

import web_app


@pytest.fixture
def client():
    web_app.app.config["TESTING"] = True
    with web_app.app.test_client() as client:
        yield client


def test_render_html(client, sample_plan):
    resp = client.post("/api/render-html", json={"planText": sample_plan, "patientName": "Jane"})
    assert resp.status_code == 200
    html = resp.get_json()["html"]
    assert "Patient: Jane" in html
    assert html.count('class="treatment-phase-card"') == 2


def test_render_html_requires_plan_text(client):
    resp = client.post("/api/render-html", json={"patientName": "Jane"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing planText"}


def test_render_html_with_booking_qr(client, sample_plan, monkeypatch):
    monkeypatch.setattr(web_app, "BOOKING_URLS", {"Elle Badrak": "https://bookings.example.com/?p=530"})
    resp = client.post("/api/render-html", json={
        "planText": sample_plan, "patientName": "Jane", "therapistName": "Elle Badrak",
    })
    html = resp.get_json()["html"]
    assert 'href="https://bookings.example.com/?p=530"' in html
    assert "data:image/svg+xml;base64," in html


def test_print_returns_html(client, sample_plan):
    resp = client.post("/api/print", json={"planText": sample_plan})
    assert resp.status_code == 200
    assert resp.mimetype == "text/html"
    assert b"<!doctype html>" in resp.data


def test_pdf_download(client, sample_plan, monkeypatch):
    from treatment_plan_renderer.plan_types import PlanExport

    def fake_export(plan_text, patient_name, therapist_name, booking_urls=None):
        return PlanExport(content=b"%PDF fake", filename="massage-treatment-plan-Jane.pdf")

    monkeypatch.setattr(web_app, "export_plan", fake_export)
    resp = client.post("/api/pdf", json={"planText": sample_plan, "patientName": "Jane"})
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data == b"%PDF fake"
    assert 'filename="massage-treatment-plan-Jane.pdf"' in resp.headers["Content-Disposition"]


def test_pdf_falls_back_to_print_html(client, sample_plan, monkeypatch):
    from treatment_plan_renderer.plan_types import PlanExport

    def fake_export(plan_text, patient_name, therapist_name, booking_urls=None):
        return PlanExport(content=b"<html>print me</html>", media_type="text/html", is_pdf=False)

    monkeypatch.setattr(web_app, "export_plan", fake_export)
    resp = client.post("/api/pdf", json={"planText": sample_plan})
    assert resp.mimetype == "text/html"
    assert resp.data == b"<html>print me</html>"


def test_models(client):
    resp = client.get("/api/models")
    assert resp.status_code == 200
    [model] = resp.get_json()
    assert model["id"] == "gemini-2.5-flash"
    assert model["provider"] == "Google"


def test_qr_code_for_known_therapist(client):
    resp = client.get("/api/qr-code/Elle%20Badrak")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["therapistName"] == "Elle Badrak"
    assert data["bookingUrl"].endswith("?p=530")
    assert data["qrCode"].startswith("data:image/svg+xml;base64,")


def test_qr_code_unknown_therapist(client):
    resp = client.get("/api/qr-code/Nobody")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Therapist not found"}


def test_generate_validates_fields(client):
    resp = client.post("/api/generate", json={"caseNote": "neck", "patientName": "Jane"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing therapistName"}


def test_generate_success(client, monkeypatch):
    monkeypatch.setattr(web_app, "generate_plan_text", lambda note: "1. Your Starting Point: ok")
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    resp = client.post("/api/generate", json={
        "caseNote": "neck", "patientName": "Jane", "therapistName": "Elle Badrak",
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["text"] == "1. Your Starting Point: ok"
    assert data["modelName"] == "Gemini 2.5 Flash (Google)"


def test_generate_error_status_passthrough(client, monkeypatch):
    from treatment_plan_renderer.generate_plan import GenerationError

    def fail(note):
        raise GenerationError(429, "Rate limit exceeded", "slow down")

    monkeypatch.setattr(web_app, "generate_plan_text", fail)
    resp = client.post("/api/generate", json={
        "caseNote": "neck", "patientName": "Jane", "therapistName": "Elle Badrak",
    })
    assert resp.status_code == 429
    assert resp.get_json() == {"error": "Rate limit exceeded", "details": "slow down"}


def test_unknown_api_route(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "API endpoint not found"}


@pytest.mark.parametrize("url", ["/api/render-html", "/api/print", "/api/pdf"])
def test_non_object_json_body_is_missing_plan_text(client, url):
    resp = client.post(url, json=["x"])
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing planText"}


def test_generate_with_non_object_json_body(client):
    resp = client.post("/api/generate", json=["x"])
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing caseNote"}
