"""
tests/conftest.py

Shared pytest fixtures available to all test modules.

Fixtures defined here are auto-discovered by pytest — no import needed.
"""

import io
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from fileproc.core.config import settings
from fileproc.main import app


# ── Core client fixture ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def client(tmp_path_factory) -> TestClient:
    """
    A synchronous TestClient wrapping the FastAPI app.

    session-scoped so the app is instantiated once per test run.
    Uploads and thumbnails go to a throwaway directory; the lifespan
    (scheduler + upload service) is entered automatically.
    """
    settings.upload_dir = str(tmp_path_factory.mktemp("uploads"))
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ── Sample payload fixtures ────────────────────────────────────────────────────

@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """
    Factory for real encoded images.

    Usage:
        data = make_image(4000, 2000, fmt="PNG", mode="RGBA")
    """

    def _make(width: int = 64, height: int = 48, fmt: str = "PNG", mode: str = "RGB") -> bytes:
        color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
        if mode == "L":
            color = 128
        buf = io.BytesIO()
        Image.new(mode, (width, height), color).save(buf, format=fmt)
        return buf.getvalue()

    return _make


@pytest.fixture
def sample_csv_bytes() -> bytes:
    return (
        b"id,email,joined,name\n"
        b"1,ann@example.com,2024-01-05,Ann\n"
        b"2,bob@example.com,2024-02-11,Bob\n"
        b"3,cy@example.com,2024-03-20,Cy\n"
        b"\n"
        b"4,dee@example.com,2024-04-02,Dee\n"
    )


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """
    Minimal PDF-looking bytes.
    Enough for header validation and the byte heuristics; not a real document.
    """
    return b"%PDF-1.4\n1 0 obj << /Type /Page /Text >> endobj\n%%EOF"


@pytest.fixture
def sample_txt_file() -> tuple:
    """
    A ("file", (filename, file_obj, content_type)) tuple ready for use with
    TestClient's `files=` parameter.

    Usage:
        response = client.post("/files/", files=[sample_txt_file])
    """
    return ("file", ("notes.txt", io.BytesIO(b"hello world\nfoo"), "text/plain"))
