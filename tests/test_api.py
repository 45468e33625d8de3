from io import BytesIO

from fastapi.testclient import TestClient
from pypdf import PdfReader

from noticepack import renderer
from server import app as server_app


def _save_draft(store, case_id, doc_type_id, data):
    return store.save_draft(case_id, doc_type_id, data)


def test_missing_configuration_returns_500(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    with TestClient(server_app.app) as client:
        resp = client.get("/api/cases/c1/documents/dt-non-renewal/pdf", headers={"Authorization": "Bearer x"})
    assert resp.status_code == 500
    assert resp.json() == {"ok": False, "error": "Missing SUPABASE_URL or SUPABASE_ANON_KEY"}


def test_pdf_requires_bearer_token(client, ca_case):
    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-non-renewal/pdf")
    assert resp.status_code == 401
    assert resp.json() == {"ok": False, "error": "Missing access token"}


def test_pdf_rejects_unknown_token(client, ca_case):
    resp = client.get(
        f"/api/cases/{ca_case['id']}/documents/dt-non-renewal/pdf", headers={"Authorization": "Bearer nope"}
    )
    assert resp.status_code == 401
    assert resp.json()["ok"] is False


def test_pdf_not_found_cases(client, store, ca_case, auth_headers):
    resp = client.get("/api/cases/missing/documents/dt-non-renewal/pdf", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"ok": False, "error": "Case not found"}

    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-unknown/pdf", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Document type not found"

    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-non-renewal/pdf", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Draft not found"


def test_cases_are_scoped_to_caller(client, store, auth_headers):
    other = store.create_case("someone-else", "Not yours", "CA")
    _save_draft(store, other["id"], "dt-non-renewal", {"tenant_name": "Jane"})
    resp = client.get(f"/api/cases/{other['id']}/documents/dt-non-renewal/pdf", headers=auth_headers)
    assert resp.status_code == 404


def test_pdf_download(client, store, ca_case, auth_headers):
    _save_draft(store, ca_case["id"], "dt-non-renewal", {"tenant_name": "Jane Tenant", "notice_date": "2024-01-05"})
    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-non-renewal/pdf", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["content-disposition"] == f'attachment; filename="{ca_case["id"]}-dt-non-renewal.pdf"'
    assert resp.headers["cache-control"] == "no-store"
    assert resp.content.startswith(b"%PDF")

    text = "\n".join(page.extract_text() or "" for page in PdfReader(BytesIO(resp.content)).pages)
    assert "Notice of Non-Renewal" in text
    assert "tenant_name: Jane Tenant" in text
    assert "notice_date: Jan 05, 2024" in text


def test_pdf_uses_fallback_for_unregistered_document(client, store, ca_case, auth_headers):
    _save_draft(store, ca_case["id"], "dt-late-rent", {"tenant_name": "Jane Tenant", "rent_amount": 1200})
    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-late-rent/pdf", headers=auth_headers)
    assert resp.status_code == 200
    text = "\n".join(page.extract_text() or "" for page in PdfReader(BytesIO(resp.content)).pages)
    assert f"Case ID: {ca_case['id']}" in text
    assert "Document Type ID: dt-late-rent" in text
    assert "rent_amount: 1200" in text
    assert text.count("Late Rent Reminder") == 1


def test_deductions_pdf_with_oversized_amounts(client, store, ca_case, auth_headers):
    _save_draft(
        store,
        ca_case["id"],
        "dt-deductions",
        {"security_deposit": "1e30", "deduction_1_description": "Carpet", "deduction_1_amount": "1e30"},
    )
    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-deductions/pdf", headers=auth_headers)
    assert resp.status_code == 200
    text = "\n".join(page.extract_text() or "" for page in PdfReader(BytesIO(resp.content)).pages)
    assert "Statement Details" in text
    assert "Carpet: 1e30" in text
    assert "Total deductions: $0.00" in text


def test_render_failure_returns_500(client, store, ca_case, auth_headers, monkeypatch):
    _save_draft(store, ca_case["id"], "dt-non-renewal", {"tenant_name": "Jane"})

    def broken_render(*args, **kwargs):
        raise renderer.RenderError("PDF construction failed: disk on fire")

    monkeypatch.setattr(server_app, "render_pdf", broken_render)
    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-non-renewal/pdf", headers=auth_headers)
    assert resp.status_code == 500
    body = resp.json()
    assert body["ok"] is False
    assert body["error"].startswith("Render failed:")

    # The next request is unaffected.
    monkeypatch.setattr(server_app, "render_pdf", renderer.render_pdf)
    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-non-renewal/pdf", headers=auth_headers)
    assert resp.status_code == 200


def test_builder_failure_returns_500(client, store, ca_case, auth_headers, monkeypatch):
    _save_draft(store, ca_case["id"], "dt-non-renewal", {"tenant_name": "Jane"})

    def broken_builder(context):
        raise KeyError("tenant_name")

    monkeypatch.setattr(server_app, "select_builder", lambda state_code, key: broken_builder)
    resp = client.get(f"/api/cases/{ca_case['id']}/documents/dt-non-renewal/pdf", headers=auth_headers)
    assert resp.status_code == 500
    assert "tenant_name" in resp.json()["error"]


def test_create_and_list_cases(client, auth_headers):
    resp = client.post("/api/cases", json={"title": "Oak Ave", "state_code": "ca"}, headers=auth_headers)
    assert resp.status_code == 201
    case = resp.json()["case"]
    assert case["state_code"] == "CA"
    assert case["status"] == "open"

    listed = client.get("/api/cases", headers=auth_headers).json()["cases"]
    assert [c["id"] for c in listed] == [case["id"]]


def test_create_case_validates_state_code(client, auth_headers):
    resp = client.post("/api/cases", json={"title": "Oak Ave", "state_code": "California"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"ok": False, "error": "State code must be two letters."}

    resp = client.post("/api/cases", json={"title": "Oak Ave"}, headers=auth_headers)
    assert resp.status_code == 422
    assert resp.json()["ok"] is False


def test_case_detail_includes_coverage(client, ca_case, auth_headers):
    body = client.get(f"/api/cases/{ca_case['id']}", headers=auth_headers).json()
    assert body["case"]["id"] == ca_case["id"]
    coverage = {row["document_type_id"]: row for row in body["coverage"]}
    assert coverage["dt-non-renewal"]["status"] == "implemented"
    assert coverage["dt-non-renewal"]["name"] == "Notice of Non-Renewal"
    assert body["documents"] == []


def test_document_wizard_and_draft_roundtrip(client, store, ca_case, auth_headers):
    base = f"/api/cases/{ca_case['id']}/documents/dt-non-renewal"
    info = client.get(base, headers=auth_headers).json()
    assert info["document"]["coverage"] == "implemented"
    assert info["schema"]["title"] == "Notice of Non-Renewal"
    assert "move_out_date" in [f["key"] for f in info["schema"]["fields"]]
    assert info["draft"] is None

    resp = client.put(f"{base}/draft", json={"data": {"tenant_name": "Jane Tenant"}}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["draft"]["status"] == "draft"

    info = client.get(base, headers=auth_headers).json()
    assert info["draft"]["data"] == {"tenant_name": "Jane Tenant"}


def test_strict_draft_save_reports_missing_fields(client, ca_case, auth_headers):
    resp = client.put(
        f"/api/cases/{ca_case['id']}/documents/dt-non-renewal/draft?strict=true",
        json={"data": {"tenant_name": "Jane Tenant"}},
        headers=auth_headers,
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["ok"] is False
    assert "Landlord name" in body["missing"]
    assert "Tenant name" not in body["missing"]


def test_mark_generated(client, store, ca_case, auth_headers):
    base = f"/api/cases/{ca_case['id']}/documents/dt-non-renewal"
    assert client.post(f"{base}/generate", headers=auth_headers).status_code == 404

    _save_draft(store, ca_case["id"], "dt-non-renewal", {"tenant_name": "Jane"})
    body = client.post(f"{base}/generate", headers=auth_headers).json()
    assert body["draft"]["status"] == "generated"
    assert body["draft"]["generated_at"]


def test_backend_health(client):
    body = client.get("/api/health/backend").json()
    assert body == {"ok": True, "counts": {"document_types": 4, "states": 2, "coverage_matrix": 8}}
