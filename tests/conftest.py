"""Pytest configuration and fixtures."""

import json
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.backend.main import app
from app.backend.services.ai import ClassificationService, get_classification_service
from app.backend.services.pdf_service import PDFService, get_pdf_service


class FakeClassifierClient:
    """Classifier client returning a canned reply and recording its calls."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[list[str], str]] = []

    def classify(self, images: list[str], instructions: str) -> str:
        self.calls.append((images, instructions))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def check_reply() -> str:
    """A well-formed reply for a one-page claim check."""
    return json.dumps(
        {
            "DocumentType": "Check",
            "Identifier": {
                "PolicyNumber": None,
                "ClaimNumber": "CLM-123",
                "InsuredName": None,
                "InsuredPhone": None,
                "InsuredEmail": None,
                "LossLocationAddress": None,
                "Carrier": None,
            },
        }
    )


@pytest.fixture
def fake_client(check_reply: str) -> FakeClassifierClient:
    return FakeClassifierClient(reply=check_reply)


@pytest.fixture
def page_images() -> list[Image.Image]:
    """Three distinguishable page renderings."""
    return [
        Image.new("RGB", (20, 30), color=color)
        for color in ("red", "green", "blue")
    ]


@pytest.fixture
def pdf_service(tmp_path) -> PDFService:
    return PDFService(upload_dir=tmp_path / "uploads", render_scale=1)


@pytest.fixture
def client(
    pdf_service: PDFService, fake_client: FakeClassifierClient
) -> Generator[TestClient, None, None]:
    """Create a test client with the classifier and uploads dir substituted."""
    app.dependency_overrides[get_pdf_service] = lambda: pdf_service
    app.dependency_overrides[get_classification_service] = (
        lambda: ClassificationService(client=fake_client)
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """
    Create a minimal valid PDF for testing.

    This is a minimal PDF structure that should be recognized as a valid PDF.
    """
    # Minimal valid PDF structure
    pdf_content = b"""%PDF-1.4
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R >>
endobj
4 0 obj
<< /Length 44 >>
stream
BT
/F1 12 Tf
100 700 Td
(Test) Tj
ET
endstream
endobj
xref
0 5
0000000000 65535 f
0000000009 00000 n
0000000058 00000 n
0000000115 00000 n
0000000214 00000 n
trailer
<< /Size 5 /Root 1 0 R >>
startxref
306
%%EOF"""
    return pdf_content


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"
