"""Unit tests for the HTTP API.

Persistence and the PDF converter are replaced through dependency overrides;
no database or LibreOffice installation is needed.
"""

import io
import uuid

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from docfill.api.conversion import attachment_header
from docfill.api.deps import get_component_factory, get_template_service
from docfill.interfaces.template import XLSX_MEDIA_TYPE
from docfill.main import create_app
from docfill.services.templates import TemplateService
from tests.conftest import build_docx, build_xlsx

OWNER = str(uuid.uuid4())
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@pytest.fixture
def client(settings, factory, repository, storage):
    """Test client whose services use in-memory fakes."""
    app = create_app(settings)
    service = TemplateService(repository, storage, factory)
    app.dependency_overrides[get_component_factory] = lambda: factory
    app.dependency_overrides[get_template_service] = lambda: service
    return TestClient(app)


@pytest.fixture
def invoice_xlsx():
    def populate(sheet):
        sheet["A1"] = "Invoice for {{name}}"
        sheet["B1"] = "{city}"

    return build_xlsx(populate)


def _upload(client, name, data, mime=XLSX_MEDIA_TYPE):
    return client.post(
        "/api/templates",
        files={"file": (name, data, mime)},
        headers={"X-User-ID": OWNER},
    )


class TestHealth:
    """Test suite for the health endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_pdf_service_health(self, client):
        response = client.get("/api/pdf-service-health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["libreoffice"] is True
        assert "timestamp" in body

    def test_pdf_service_unavailable(self, client, converter):
        converter.available = False

        body = client.get("/api/pdf-service-health").json()

        assert body["status"] == "unavailable"
        assert body["libreoffice"] is False


class TestConvertToPdf:
    """Test suite for POST /api/convert-to-pdf."""

    def test_success(self, client, converter):
        response = client.post(
            "/api/convert-to-pdf",
            files={"file": ("Quarterly Report.docx", b"docx bytes", DOCX_MIME)},
        )

        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 fake"
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            'attachment; filename="Quarterly Report.pdf"'
        )
        assert converter.calls == [(b"docx bytes", "Quarterly Report.docx")]

    def test_non_ascii_file_name(self, client, converter):
        response = client.post(
            "/api/convert-to-pdf",
            files={"file": ("報告.docx", b"docx bytes", DOCX_MIME)},
        )

        assert response.status_code == 200
        assert response.headers["content-disposition"] == (
            "attachment; filename=\"__.pdf\"; filename*=UTF-8''%E5%A0%B1%E5%91%8A.pdf"
        )

    def test_missing_file(self, client):
        response = client.post("/api/convert-to-pdf")

        assert response.status_code == 400
        assert response.json() == {"error": "No file provided"}

    def test_unavailable(self, client, converter):
        converter.available = False

        response = client.post(
            "/api/convert-to-pdf", files={"file": ("a.docx", b"docx bytes", DOCX_MIME)}
        )

        assert response.status_code == 503
        assert converter.calls == []

    def test_conversion_failure(self, client, converter):
        converter.fail = True

        response = client.post(
            "/api/convert-to-pdf", files={"file": ("a.docx", b"docx bytes", DOCX_MIME)}
        )

        assert response.status_code == 500
        assert response.json()["error"] == "PDF conversion failed"
        assert "code 1" in response.json()["details"]


class TestPlaceholderExtraction:
    """Test suite for POST /api/placeholders/extract."""

    def test_spreadsheet(self, client, invoice_xlsx, storage):
        response = client.post(
            "/api/placeholders/extract",
            files={"file": ("invoice.xlsx", invoice_xlsx, XLSX_MEDIA_TYPE)},
        )

        assert response.status_code == 200
        assert response.json() == {
            "filename": "invoice.xlsx",
            "kind": "spreadsheet",
            "placeholders": ["city", "name"],
        }
        assert storage.objects == {}

    def test_document(self, client):
        data = build_docx("Dear {{ client }}")

        response = client.post(
            "/api/placeholders/extract", files={"file": ("letter.docx", data, DOCX_MIME)}
        )

        assert response.json()["placeholders"] == ["client"]

    def test_unsupported_type(self, client):
        response = client.post(
            "/api/placeholders/extract", files={"file": ("notes.txt", b"{{a}}", "text/plain")}
        )

        assert response.status_code == 415

    def test_corrupted_file_yields_no_placeholders(self, client):
        response = client.post(
            "/api/placeholders/extract",
            files={"file": ("broken.xlsx", b"garbage", XLSX_MEDIA_TYPE)},
        )

        assert response.status_code == 200
        assert response.json()["placeholders"] == []


class TestTemplates:
    """Test suite for the template endpoints."""

    def test_upload(self, client, invoice_xlsx, repository):
        response = _upload(client, "invoice.xlsx", invoice_xlsx)

        body = response.json()
        assert response.status_code == 201
        assert body["owner_id"] == OWNER
        assert body["kind"] == "spreadsheet"
        assert body["placeholders"] == ["city", "name"]
        assert body["use_count"] == 0
        assert uuid.UUID(body["id"]) in repository.templates

    def test_upload_requires_user(self, client, invoice_xlsx):
        response = client.post(
            "/api/templates", files={"file": ("invoice.xlsx", invoice_xlsx, XLSX_MEDIA_TYPE)}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "X-User-ID header is required"

    def test_upload_rejects_bad_user(self, client, invoice_xlsx):
        response = client.post(
            "/api/templates",
            files={"file": ("invoice.xlsx", invoice_xlsx, XLSX_MEDIA_TYPE)},
            headers={"X-User-ID": "not-a-uuid"},
        )

        assert response.status_code == 400

    def test_upload_unsupported_type(self, client):
        response = _upload(client, "notes.txt", b"{{a}}", "text/plain")

        assert response.status_code == 415

    def test_generate(self, client, invoice_xlsx):
        template_id = _upload(client, "invoice.xlsx", invoice_xlsx).json()["id"]

        response = client.post(
            f"/api/templates/{template_id}/generate",
            json={"values": {"name": "Ada", "city": "Paris"}},
            headers={"X-User-ID": OWNER},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        assert response.headers["content-disposition"].startswith('attachment; filename="invoice_')
        sheet = load_workbook(io.BytesIO(response.content)).active
        assert sheet["A1"].value == "Invoice for Ada"
        assert sheet["B1"].value == "Paris"

    def test_generate_pdf(self, client):
        template_id = _upload(client, "letter.docx", build_docx("Dear {{ client }}"), DOCX_MIME).json()["id"]

        response = client.post(
            f"/api/templates/{template_id}/generate",
            json={"values": {"client": "Ada"}, "format": "pdf"},
            headers={"X-User-ID": OWNER},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content == b"%PDF-1.4 fake"

    def test_generate_non_ascii_template_name(self, client, repository, storage):
        data = build_xlsx(lambda sheet: sheet.__setitem__("A1", "{{name}}"))
        template_id = _upload(client, "報告.xlsx", data).json()["id"]

        response = client.post(
            f"/api/templates/{template_id}/generate",
            json={"values": {"name": "Ada"}},
            headers={"X-User-ID": OWNER},
        )

        disposition = response.headers["content-disposition"]
        assert response.status_code == 200
        assert disposition.startswith('attachment; filename="___')
        assert "filename*=UTF-8''%E5%A0%B1%E5%91%8A_" in disposition
        assert len(repository.artifacts) == 1
        assert repository.templates[uuid.UUID(template_id)].use_count == 1

    def test_generate_unknown_template(self, client):
        response = client.post(
            f"/api/templates/{uuid.uuid4()}/generate",
            json={"values": {}},
            headers={"X-User-ID": OWNER},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Template not found"

    def test_generate_bad_image(self, client):
        template_id = _upload(client, "letter.docx", build_docx("Logo {{ logo }}"), DOCX_MIME).json()["id"]

        response = client.post(
            f"/api/templates/{template_id}/generate",
            json={"values": {"logo": "data:image/png;base64,"}},
            headers={"X-User-ID": OWNER},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "Image processing failed"

    def test_generate_format_mismatch(self, client, invoice_xlsx):
        template_id = _upload(client, "invoice.xlsx", invoice_xlsx).json()["id"]

        response = client.post(
            f"/api/templates/{template_id}/generate",
            json={"values": {}, "format": "docx"},
            headers={"X-User-ID": OWNER},
        )

        assert response.status_code == 400

    def test_generate_pdf_unavailable(self, client, converter, invoice_xlsx):
        template_id = _upload(client, "invoice.xlsx", invoice_xlsx).json()["id"]
        converter.available = False

        response = client.post(
            f"/api/templates/{template_id}/generate",
            json={"values": {"name": "Ada"}, "format": "pdf"},
            headers={"X-User-ID": OWNER},
        )

        assert response.status_code == 503

    def test_generate_invalid_format(self, client, invoice_xlsx):
        template_id = _upload(client, "invoice.xlsx", invoice_xlsx).json()["id"]

        response = client.post(
            f"/api/templates/{template_id}/generate",
            json={"values": {}, "format": "odt"},
            headers={"X-User-ID": OWNER},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"

    def test_delete(self, client, invoice_xlsx, repository):
        template_id = _upload(client, "invoice.xlsx", invoice_xlsx).json()["id"]

        first = client.delete(f"/api/templates/{template_id}", headers={"X-User-ID": OWNER})
        second = client.delete(f"/api/templates/{template_id}", headers={"X-User-ID": OWNER})

        assert first.status_code == 204
        assert second.status_code == 404
        assert repository.templates == {}


class TestAttachmentHeader:
    """Test suite for attachment_header."""

    def test_ascii_name(self):
        assert attachment_header("invoice_2024-01-31.xlsx") == {
            "Content-Disposition": 'attachment; filename="invoice_2024-01-31.xlsx"'
        }

    def test_non_ascii_name_is_latin1_safe(self):
        header = attachment_header("Überweisung 報告.pdf")["Content-Disposition"]

        header.encode("latin-1")
        assert 'filename="_berweisung __.pdf"' in header
        assert header.endswith("filename*=UTF-8''%C3%9Cberweisung%20%E5%A0%B1%E5%91%8A.pdf")

    def test_quotes_and_line_breaks_removed(self):
        header = attachment_header('a"b\r\nc.pdf')["Content-Disposition"]

        assert header == 'attachment; filename="abc.pdf"'
