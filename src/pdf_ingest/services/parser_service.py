"""Document parsing service for the supported file types."""

import asyncio
import io
import re
from pathlib import Path
from typing import List, Optional

import PyPDF2
from PyPDF2.errors import PdfReadError

from pdf_ingest.config import get_settings
from pdf_ingest.models.document import DocumentMetadata, ParsedDocument
from pdf_ingest.utils.errors import InputError
from pdf_ingest.utils.logging import get_logger

logger = get_logger("parser_service")
settings = get_settings()


class ParserService:
    """
    Service for extracting text from a document on disk.

    Supports:
    - PDF (`.pdf`) - PyPDF2
    - TXT (`.txt`) - Direct text extraction
    - MD (`.md`) - Markdown text
    """

    def __init__(self, allowed_types: Optional[List[str]] = None):
        self.allowed_types = allowed_types or settings.allowed_file_types

    async def extract_text(self, path: str) -> str:
        """Extract the text of the document at path."""
        document = await self.parse_file(path)
        return document.text

    async def parse_file(self, path: str) -> ParsedDocument:
        """
        Read and parse the document at path.

        Args:
            path: Path to the document

        Returns:
            ParsedDocument with extracted text and metadata

        Raises:
            InputError: If the file is missing, unreadable, of an unsupported
                type, or contains no extractable text
        """
        file_path = Path(path)
        file_type = file_path.suffix.lower().lstrip(".")

        if file_type not in self.allowed_types:
            raise InputError(
                f"Unsupported file type: {file_type or '(none)'}. "
                f"Allowed types: {', '.join(self.allowed_types)}",
                path=path,
                file_type=file_type,
            )

        if not file_path.is_file():
            raise InputError(f"File not found: {path}", path=path)

        try:
            file_data = await asyncio.to_thread(file_path.read_bytes)
        except OSError as e:
            raise InputError(f"Failed to read file: {e}", path=path) from e

        logger.info(f"Parsing document: type={file_type}, filename={file_path.name}, bytes={len(file_data)}")

        if file_type == "pdf":
            return await asyncio.to_thread(self._parse_pdf, file_data, file_path.name)
        return self._parse_text(file_data, file_type, file_path.name)

    def _parse_pdf(self, file_data: bytes, filename: str) -> ParsedDocument:
        """
        Parse PDF bytes using PyPDF2.

        Pages that fail to extract are skipped with a warning; a PDF with no
        extractable text at all is an error.
        """
        try:
            pdf_reader = PyPDF2.PdfReader(io.BytesIO(file_data))
            pages = list(pdf_reader.pages)
        except (PdfReadError, ValueError, KeyError) as e:
            raise InputError(
                f"PDF file is corrupted or invalid: {e}",
                path=filename,
                file_type="pdf",
            ) from e

        text_parts = []
        for page_num, page in enumerate(pages, start=1):
            try:
                page_text = page.extract_text() or ""
            except Exception as page_error:
                logger.warning(f"Failed to extract text from page {page_num} in {filename}: {page_error}")
                continue
            if page_text.strip():
                text_parts.append(page_text)

        if not text_parts:
            raise InputError(
                "No text could be extracted from PDF. The file may be image-based or corrupted.",
                path=filename,
                file_type="pdf",
            )

        full_text = "\n\n".join(text_parts)

        try:
            info = pdf_reader.metadata or {}
        except PdfReadError:
            info = {}

        metadata = DocumentMetadata(
            page_count=len(pages),
            word_count=len(re.findall(r"\b\w+\b", full_text)),
            character_count=len(full_text),
            title=_as_str(info.get("/Title")),
            author=_as_str(info.get("/Author")),
        )

        logger.info(
            f"Successfully parsed PDF: {filename}, pages={metadata.page_count}, "
            f"words={metadata.word_count}, chars={metadata.character_count}"
        )
        return ParsedDocument(file_name=filename, text=full_text, metadata=metadata, file_type="pdf")

    def _parse_text(self, file_data: bytes, file_type: str, filename: str) -> ParsedDocument:
        """Decode a plain text or markdown file."""
        # Try UTF-8 first, then fallback to other encodings
        encodings = ["utf-8", "cp1252", "latin-1"]

        text = None
        used_encoding = None
        for encoding in encodings:
            try:
                text = file_data.decode(encoding)
                used_encoding = encoding
                break
            except UnicodeDecodeError:
                continue

        if text is None:
            raise InputError(
                "Failed to decode text file. Unsupported encoding.",
                path=filename,
                file_type=file_type,
            )

        # Remove BOM if present
        if text.startswith("\ufeff"):
            text = text[1:]

        if not text.strip():
            raise InputError("Text file is empty.", path=filename, file_type=file_type)

        metadata = DocumentMetadata(
            word_count=len(re.findall(r"\b\w+\b", text)),
            character_count=len(text),
            encoding=used_encoding,
        )

        logger.info(
            f"Successfully parsed {file_type.upper()}: {filename}, "
            f"words={metadata.word_count}, chars={metadata.character_count}, encoding={used_encoding}"
        )
        return ParsedDocument(file_name=filename, text=text, metadata=metadata, file_type=file_type)


def _as_str(value) -> Optional[str]:
    return str(value) if value else None
