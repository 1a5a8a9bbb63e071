import io
import zipfile
from datetime import timedelta

import pytest

from conftest import auth_headers
from modules.common.timeutils import utcnow


def _register(client, email, name):
    resp = client.post("/auth/register", json={"email": email, "password": "secret123", "name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()["token"]


@pytest.fixture
def admin_token(client):
    return _register(client, "admin@example.com", "Admin")


@pytest.fixture
def user_token(client, admin_token):
    return _register(client, "user@example.com", "Regular")


def _upload(client, token, filename="doc.pdf", content=b"", content_type="application/pdf", **data):
    files = {"file": (filename, content, content_type)}
    return client.post("/documents/upload", files=files, data=data, headers=auth_headers(token))


def _create_active(client, token, example_pdf, filename="doc.pdf"):
    resp = _upload(client, token, filename, example_pdf)
    assert resp.status_code == 201, resp.text
    doc_id = resp.json()["id"]
    resp = client.put(f"/documents/{doc_id}", json={"status": "active"}, headers=auth_headers(token))
    assert resp.status_code == 200, resp.text
    return doc_id


def test_upload_pdf_accepted(client, admin_token, example_pdf):
    resp = _upload(client, admin_token, "valid.pdf", example_pdf, description="A test")
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["status"] == "draft"
    assert body["title"] == "valid"
    assert body["description"] == "A test"
    assert body["creator"]["email"] == "admin@example.com"
    assert "file_path" not in body


def test_upload_is_admin_only(client, user_token, example_pdf):
    resp = _upload(client, user_token, "valid.pdf", example_pdf)
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"
    assert resp.json()["message"] == "Role 'user' cannot perform this action"


def test_upload_rejects_unsupported_type(client, admin_token):
    resp = _upload(client, admin_token, "archive.zip", b"PK fake", "application/zip")
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_upload_with_deadline_and_title(client, admin_token, example_pdf):
    resp = _upload(client, admin_token, "x.pdf", example_pdf, title="Custom", deadline="2031-01-15T10:00:00")
    assert resp.status_code == 201, resp.text
    assert resp.json()["title"] == "Custom"
    assert resp.json()["deadline"].startswith("2031-01-15T10:00:00")


def test_get_list_and_download(client, admin_token, user_token, example_pdf):
    doc_id = _upload(client, admin_token, "fetch me.pdf", example_pdf).json()["id"]

    listing = client.get("/documents", params={"search": "FETCH"}, headers=auth_headers(user_token))
    assert listing.status_code == 200
    assert [d["id"] for d in listing.json()["documents"]] == [doc_id]

    assert client.get("/documents", params={"status": "active"}, headers=auth_headers(user_token)).json()["total"] == 0

    single = client.get(f"/documents/{doc_id}", headers=auth_headers(user_token))
    assert single.status_code == 200
    assert single.json()["file_name"] == "fetch me.pdf"

    download = client.get(f"/documents/{doc_id}/download", headers=auth_headers(user_token))
    assert download.status_code == 200
    assert download.content == example_pdf
    assert download.headers["content-type"].startswith("application/pdf")
    assert "attachment" in download.headers["content-disposition"]


def test_documents_require_authentication(client):
    assert client.get("/documents").status_code == 401
    assert client.get("/documents/stats").status_code == 401


def test_missing_document_is_404(client, user_token):
    for resp in (
        client.get("/documents/nope", headers=auth_headers(user_token)),
        client.get("/documents/nope/download", headers=auth_headers(user_token)),
        client.post("/documents/nope/sign", headers=auth_headers(user_token)),
        client.delete("/documents/nope", headers=auth_headers(user_token)),
    ):
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"


def test_non_owner_cannot_update_or_delete(client, admin_token, user_token, example_pdf):
    doc_id = _upload(client, admin_token, "owned.pdf", example_pdf).json()["id"]

    resp = client.put(f"/documents/{doc_id}", json={"title": "mine now"}, headers=auth_headers(user_token))
    assert resp.status_code == 403
    resp = client.delete(f"/documents/{doc_id}", headers=auth_headers(user_token))
    assert resp.status_code == 403

    resp = client.delete(f"/documents/{doc_id}", headers=auth_headers(admin_token))
    assert resp.status_code == 200
    assert client.get(f"/documents/{doc_id}", headers=auth_headers(admin_token)).status_code == 404


def test_update_rejects_invalid_status(client, admin_token, example_pdf):
    doc_id = _upload(client, admin_token, "s.pdf", example_pdf).json()["id"]
    resp = client.put(f"/documents/{doc_id}", json={"status": "published"}, headers=auth_headers(admin_token))
    assert resp.status_code == 400


def test_sign_flow(client, admin_token, user_token, example_pdf):
    draft_id = _upload(client, admin_token, "draft.pdf", example_pdf).json()["id"]
    resp = client.post(f"/documents/{draft_id}/sign", headers=auth_headers(user_token))
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_state"

    doc_id = _create_active(client, admin_token, example_pdf)
    first = client.post(f"/documents/{doc_id}/sign", headers=auth_headers(user_token))
    assert first.status_code == 201, first.text
    assert first.json()["document_id"] == doc_id

    second = client.post(f"/documents/{doc_id}/sign", headers=auth_headers(user_token))
    assert second.status_code == 409
    assert second.json()["error"] == "conflict"

    detail = client.get(f"/documents/{doc_id}", headers=auth_headers(admin_token)).json()
    assert len(detail["signatures"]) == 1
    assert detail["signatures"][0]["user"]["email"] == "user@example.com"


def test_signed_download_single_then_archive(client, admin_token, user_token, example_pdf):
    resp = client.get("/documents/download/signed", headers=auth_headers(user_token))
    assert resp.status_code == 404

    first = _create_active(client, admin_token, example_pdf, "first.pdf")
    second = _create_active(client, admin_token, example_pdf, "second.pdf")

    client.post(f"/documents/{first}/sign", headers=auth_headers(user_token))
    resp = client.get("/documents/download/signed", headers=auth_headers(user_token))
    assert resp.status_code == 200
    assert resp.headers["x-export-kind"] == "single"
    assert resp.content == example_pdf

    client.post(f"/documents/{second}/sign", headers=auth_headers(user_token))
    resp = client.get("/documents/download/signed", headers=auth_headers(user_token))
    assert resp.status_code == 200
    assert resp.headers["x-export-kind"] == "archive"
    assert resp.headers["content-type"] == "application/zip"
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        assert sorted(zf.namelist()) == ["first.pdf", "second.pdf"]


def test_document_stats_endpoint(client, admin_token, user_token, example_pdf):
    _create_active(client, admin_token, example_pdf)

    admin_stats = client.get("/documents/stats", headers=auth_headers(admin_token)).json()
    assert admin_stats["active"] == 1
    assert admin_stats["pending"] == 1
    assert admin_stats["total_users"] == 2

    user_stats = client.get("/documents/stats", headers=auth_headers(user_token)).json()
    assert user_stats["pending"] == 1
    assert user_stats["total_users"] is None


def test_dashboard_and_reports(client, admin_token, user_token, example_pdf):
    doc_id = _create_active(client, admin_token, example_pdf, "report.pdf")
    deadline = (utcnow() + timedelta(days=5)).isoformat()
    client.put(f"/documents/{doc_id}", json={"deadline": deadline}, headers=auth_headers(admin_token))

    dashboard = client.get("/dashboard/stats", headers=auth_headers(user_token)).json()
    assert dashboard["total_documents"] == 1
    assert dashboard["pending_actions"][0]["id"] == doc_id
    assert dashboard["pending_actions"][0]["days_left"] == 5

    client.post(f"/documents/{doc_id}/sign", headers=auth_headers(user_token))

    reports = client.get("/dashboard/reports/signatures", headers=auth_headers(admin_token)).json()
    assert len(reports) == 1
    assert reports[0]["status"] == "completed"
    assert reports[0]["signatures"][0]["user_email"] == "user@example.com"

    single = client.get(f"/dashboard/reports/signatures/{doc_id}", headers=auth_headers(admin_token))
    assert single.json()["document_id"] == doc_id

    hidden = client.get(f"/dashboard/reports/signatures/{doc_id}", headers=auth_headers(user_token))
    assert hidden.status_code == 200
    assert hidden.json() is None

    pdf = client.get("/dashboard/reports/signatures/pdf", params={"document_id": doc_id},
                     headers=auth_headers(admin_token))
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")
    assert f"signature-report-{doc_id}.pdf" in pdf.headers["content-disposition"]


def test_health(client):
    assert client.get("/health").json()["status"] == "OK"
