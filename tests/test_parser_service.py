"""Tests for ParserService."""

import pytest

from pdf_ingest.services.parser_service import ParserService
from pdf_ingest.utils.errors import InputError


def build_pdf(text: str) -> bytes:
    """Build a one-page PDF that draws text in Helvetica."""
    stream = f"BT /F1 24 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode()
    return bytes(out)


@pytest.fixture
def parser():
    return ParserService(allowed_types=["pdf", "txt", "md"])


@pytest.mark.asyncio
async def test_parse_pdf(parser, tmp_path):
    path = tmp_path / "hello.pdf"
    path.write_bytes(build_pdf("Hello from a PDF"))

    document = await parser.parse_file(str(path))

    assert "Hello from a PDF" in document.text
    assert document.file_name == "hello.pdf"
    assert document.file_type == "pdf"
    assert document.metadata.page_count == 1


@pytest.mark.asyncio
async def test_extract_text_returns_plain_text(parser, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("First line.\n\nSecond paragraph.", encoding="utf-8")
    assert await parser.extract_text(str(path)) == "First line.\n\nSecond paragraph."


@pytest.mark.asyncio
async def test_parse_markdown_strips_bom(parser, tmp_path):
    path = tmp_path / "readme.md"
    path.write_bytes("\ufeff# Title\n\nBody text".encode("utf-8"))

    document = await parser.parse_file(str(path))

    assert document.text == "# Title\n\nBody text"
    assert document.metadata.encoding == "utf-8"


@pytest.mark.asyncio
async def test_parse_latin1_text(parser, tmp_path):
    path = tmp_path / "legacy.txt"
    path.write_bytes("Caf\xe9 cr\xe8me".encode("latin-1"))
    document = await parser.parse_file(str(path))
    assert document.text == "Café crème"


@pytest.mark.asyncio
async def test_missing_file(parser, tmp_path):
    with pytest.raises(InputError) as exc_info:
        await parser.parse_file(str(tmp_path / "nope.pdf"))
    assert "File not found" in exc_info.value.message
    assert exc_info.value.exit_code == 2


@pytest.mark.asyncio
async def test_unsupported_type(parser, tmp_path):
    path = tmp_path / "slides.pptx"
    path.write_bytes(b"data")
    with pytest.raises(InputError) as exc_info:
        await parser.parse_file(str(path))
    assert exc_info.value.details["file_type"] == "pptx"


@pytest.mark.asyncio
async def test_corrupted_pdf(parser, tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"this is not a pdf at all")
    with pytest.raises(InputError):
        await parser.parse_file(str(path))


@pytest.mark.asyncio
async def test_empty_text_file(parser, tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("   \n", encoding="utf-8")
    with pytest.raises(InputError) as exc_info:
        await parser.parse_file(str(path))
    assert "empty" in exc_info.value.message
