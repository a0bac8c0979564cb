"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.pdf2csv.config import Settings, get_settings
from app.pdf2csv.main import app
from app.pdf2csv.models import InferenceRequest, InferenceResponse, UploadedDocument
from app.pdf2csv.routers.conversion import get_pipeline
from app.pdf2csv.services.pipeline import ConversionPipeline


def build_pdf(lines: list[str]) -> bytes:
    """
    Build a minimal, well-formed single-page PDF showing ``lines``.

    Object offsets in the xref table are computed, so strict readers accept it.
    """
    ops = ["BT", "/F1 12 Tf", "72 720 Td", "14 TL"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        ops.append(f"({escaped}) Tj T*")
    ops.append("ET")
    content = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(out)


class StubInferenceClient:
    """Deterministic stand-in for the OpenAI inference client."""

    def __init__(
        self,
        reply: str = "",
        configured: bool = True,
        error: Exception | None = None,
    ):
        self.reply = reply
        self.configured = configured
        self.error = error
        self.requests: list[InferenceRequest] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def infer(self, request: InferenceRequest) -> InferenceResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return InferenceResponse(text=self.reply, model="stub")


TABLE_REPLY = (
    "Here is the result: "
    + json.dumps(
        {
            "headers": ["Product", "Quantity", "Price"],
            "rows": [
                ["Widget", "2", "10.00"],
                ["Gadget, large", "1", "15.50"],
                ["Gizmo"],
            ],
            "metadata": {"source": "Invoice", "rowCount": 3},
        }
    )
    + " Thanks."
)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at temporary directories."""
    settings = Settings(
        _env_file=None,
        openai_api_key="test-key",
        upload_dir=tmp_path / "uploads",
        output_dir=tmp_path / "output",
    )
    settings.ensure_directories()
    return settings


@pytest.fixture
def stub_client() -> StubInferenceClient:
    return StubInferenceClient(reply=TABLE_REPLY)


@pytest.fixture
def pipeline(settings: Settings, stub_client: StubInferenceClient) -> ConversionPipeline:
    return ConversionPipeline(settings, stub_client)


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """A PDF with a few lines of text."""
    return build_pdf(["Invoice 2024-001", "Widget 2 10.00", "Gadget 1 15.50"])


@pytest.fixture
def blank_pdf_bytes() -> bytes:
    """A PDF whose only page contains no text."""
    return build_pdf([])


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"


@pytest.fixture
def sample_document(sample_pdf_bytes: bytes) -> UploadedDocument:
    return UploadedDocument(
        content=sample_pdf_bytes,
        media_type="application/pdf",
        filename="invoice.pdf",
    )


@pytest.fixture
def client(
    settings: Settings,
    pipeline: ConversionPipeline,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[TestClient, None, None]:
    """Create a test client wired to temporary directories and the stub client."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("UPLOAD_DIR", str(settings.upload_dir))
    monkeypatch.setenv("OUTPUT_DIR", str(settings.output_dir))
    get_settings.cache_clear()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    get_settings.cache_clear()
