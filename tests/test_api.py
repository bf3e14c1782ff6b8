"""Tests for FastAPI endpoints."""

import base64
import io
import json
from unittest.mock import patch

from fastapi.testclient import TestClient
from PIL import Image

from app.backend.services.ai import ClassificationServiceFailure
from app.backend.services.pdf_service import PDFConversionError, PDFService


def _uploaded_files(pdf_service: PDFService) -> list:
    if not pdf_service.upload_dir.exists():
        return []
    return [p for p in pdf_service.upload_dir.rglob("*") if p.is_file()]


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, client: TestClient):
        """Test root endpoint returns health status."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    def test_health_endpoint(self, client: TestClient):
        """Test /health endpoint returns health status."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestConvertPdfEndpoint:
    """Tests for POST /convert-pdf."""

    def test_missing_file_returns_400(self, client: TestClient, fake_client):
        response = client.post("/convert-pdf")
        assert response.status_code == 400
        assert response.json() == {"message": "No PDF file provided!"}
        assert fake_client.calls == []

    def test_text_value_instead_of_file_returns_400(self, client: TestClient, fake_client):
        response = client.post("/convert-pdf", data={"data": "not-a-file"})
        assert response.status_code == 400
        assert response.json() == {"message": "No PDF file provided!"}
        assert fake_client.calls == []

    def test_multipart_text_value_instead_of_file_returns_400(
        self, client: TestClient, fake_client
    ):
        response = client.post(
            "/convert-pdf",
            data={"data": "not-a-file"},
            files={"attachment": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert response.json() == {"message": "No PDF file provided!"}
        assert fake_client.calls == []

    def test_empty_file_returns_400(self, client: TestClient, fake_client):
        response = client.post(
            "/convert-pdf",
            files={"data": ("empty.pdf", b"", "application/pdf")},
        )
        assert response.status_code == 400
        assert response.json() == {"message": "No PDF file provided!"}
        assert fake_client.calls == []

    def test_check_is_classified(
        self,
        client: TestClient,
        fake_client,
        pdf_service: PDFService,
        sample_pdf_bytes: bytes,
        page_images,
        check_reply: str,
    ):
        with patch.object(PDFService, "iter_page_images", return_value=iter(page_images[:1])):
            response = client.post(
                "/convert-pdf",
                files={"data": ("check.pdf", sample_pdf_bytes, "application/pdf")},
            )

        assert response.status_code == 200
        assert response.json() == json.loads(check_reply)
        assert len(fake_client.calls) == 1
        assert len(fake_client.calls[0][0]) == 1
        assert _uploaded_files(pdf_service) == []

    def test_pages_sent_in_document_order(
        self,
        client: TestClient,
        fake_client,
        sample_pdf_bytes: bytes,
        page_images,
    ):
        with patch.object(PDFService, "iter_page_images", return_value=iter(page_images)):
            response = client.post(
                "/convert-pdf",
                files={"data": ("scope.pdf", sample_pdf_bytes, "application/pdf")},
            )

        assert response.status_code == 200
        sent = fake_client.calls[0][0]
        assert len(sent) == len(page_images)
        for encoded, expected in zip(sent, page_images):
            decoded = Image.open(io.BytesIO(base64.b64decode(encoded)))
            assert decoded.getpixel((0, 0)) == expected.getpixel((0, 0))

    def test_fenced_reply_is_accepted(
        self,
        client: TestClient,
        fake_client,
        sample_pdf_bytes: bytes,
        page_images,
        check_reply: str,
    ):
        fake_client.reply = f"```json\n{check_reply}\n```"
        with patch.object(PDFService, "iter_page_images", return_value=iter(page_images[:1])):
            response = client.post(
                "/convert-pdf",
                files={"data": ("check.pdf", sample_pdf_bytes, "application/pdf")},
            )

        assert response.status_code == 200
        assert response.json() == json.loads(check_reply)

    def test_out_of_enum_type_returns_500(
        self,
        client: TestClient,
        fake_client,
        pdf_service: PDFService,
        sample_pdf_bytes: bytes,
        page_images,
    ):
        fake_client.reply = '{"DocumentType": "Invoice", "Identifier": {"ClaimNumber": "CLM-9"}}'
        with patch.object(PDFService, "iter_page_images", return_value=iter(page_images[:1])):
            response = client.post(
                "/convert-pdf",
                files={"data": ("invoice.pdf", sample_pdf_bytes, "application/pdf")},
            )

        assert response.status_code == 500
        body = response.json()
        assert set(body) == {"message"}
        assert "Invoice" not in body["message"]
        assert "CLM-9" not in response.text
        assert _uploaded_files(pdf_service) == []

    def test_malformed_reply_returns_500(
        self,
        client: TestClient,
        fake_client,
        sample_pdf_bytes: bytes,
        page_images,
    ):
        fake_client.reply = "I think this is a check."
        with patch.object(PDFService, "iter_page_images", return_value=iter(page_images[:1])):
            response = client.post(
                "/convert-pdf",
                files={"data": ("check.pdf", sample_pdf_bytes, "application/pdf")},
            )

        assert response.status_code == 500
        assert "invalid response" in response.json()["message"]

    def test_service_failure_returns_500(
        self,
        client: TestClient,
        fake_client,
        pdf_service: PDFService,
        sample_pdf_bytes: bytes,
        page_images,
    ):
        fake_client.error = ClassificationServiceFailure("rate limited")
        with patch.object(PDFService, "iter_page_images", return_value=iter(page_images[:1])):
            response = client.post(
                "/convert-pdf",
                files={"data": ("check.pdf", sample_pdf_bytes, "application/pdf")},
            )

        assert response.status_code == 500
        assert "classification service" in response.json()["message"]
        assert len(fake_client.calls) == 1
        assert _uploaded_files(pdf_service) == []

    def test_conversion_failure_returns_500_and_removes_upload(
        self,
        client: TestClient,
        fake_client,
        pdf_service: PDFService,
        sample_pdf_bytes: bytes,
    ):
        with patch.object(
            PDFService,
            "iter_page_images",
            side_effect=PDFConversionError("Invalid or corrupted PDF file"),
        ):
            response = client.post(
                "/convert-pdf",
                files={"data": ("corrupt.pdf", sample_pdf_bytes, "application/pdf")},
            )

        assert response.status_code == 500
        assert response.json() == {"message": "An error occurred while converting the PDF."}
        assert fake_client.calls == []
        assert _uploaded_files(pdf_service) == []

    def test_non_pdf_upload_returns_500(
        self,
        client: TestClient,
        fake_client,
        invalid_file_bytes: bytes,
    ):
        response = client.post(
            "/convert-pdf",
            files={"data": ("notes.txt", invalid_file_bytes, "text/plain")},
        )
        assert response.status_code == 500
        assert response.json() == {"message": "An error occurred while converting the PDF."}
        assert fake_client.calls == []

    def test_empty_document_returns_500(
        self,
        client: TestClient,
        fake_client,
        sample_pdf_bytes: bytes,
    ):
        with patch.object(PDFService, "iter_page_images", return_value=iter([])):
            response = client.post(
                "/convert-pdf",
                files={"data": ("blank.pdf", sample_pdf_bytes, "application/pdf")},
            )

        assert response.status_code == 500
        assert response.json() == {"message": "An error occurred while converting the PDF."}
        assert fake_client.calls == []


class TestCORS:
    """Tests for CORS configuration."""

    def test_cors_allows_localhost_3000(self, client: TestClient):
        """Test that localhost:3000 is allowed."""
        response = client.get(
            "/health",
            headers={"Origin": "http://localhost:3000"},
        )
        assert response.status_code == 200
        assert (
            response.headers.get("access-control-allow-origin")
            == "http://localhost:3000"
        )
