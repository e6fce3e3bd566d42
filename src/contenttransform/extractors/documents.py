"""Raw bytes to plain text, dispatching on the sniffed document format."""

from __future__ import annotations

import io
import logging
import zipfile
from typing import Optional, Protocol

import fitz
from docx import Document

from .html_clean import HTMLExtractor

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 100_000

_HTML_MARKERS = (b"<!doctype html", b"<html", b"<head", b"<body")
_TEXT_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


class ExtractionError(Exception):
    """Raised when a document cannot be parsed into text."""


class Extractor(Protocol):
    def extract(self, data: bytes) -> str:
        ...


def sniff_format(data: bytes) -> str:
    """Best-effort format detection from leading bytes."""
    head = data[:1024].lstrip()
    if head.startswith(b"%PDF"):
        return "pdf"
    if head.startswith(b"PK\x03\x04"):
        return "docx" if _is_docx_package(data) else "binary"
    lowered = head.lower()
    if lowered.startswith(b"\xef\xbb\xbf"):
        lowered = lowered[3:].lstrip()
    if lowered.startswith(b"<") and any(marker in lowered for marker in _HTML_MARKERS):
        return "html"
    if b"\x00" in data[:1024]:
        return "binary"
    return "text"


def _is_docx_package(data: bytes) -> bool:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            names = set(zf.namelist())
    except zipfile.BadZipFile:
        return False
    return "[Content_Types].xml" in names and any(name.startswith("word/") for name in names)


class DocumentExtractor:
    """Default extraction capability: HTML, PDF, DOCX and plain text.

    Unrecognised binary payloads produce an empty string. Output is capped at
    ``max_chars`` characters.
    """

    def __init__(self, *, max_chars: Optional[int] = DEFAULT_MAX_CHARS) -> None:
        self.max_chars = max_chars
        self.html = HTMLExtractor(max_chars=max_chars)

    def extract(self, data: bytes) -> str:
        if not data:
            return ""
        kind = sniff_format(data)
        logger.debug("Extracting %d bytes as %s", len(data), kind)
        if kind == "html":
            return self.html.extract(data)
        if kind == "pdf":
            text = self._extract_pdf(data)
        elif kind == "docx":
            text = self._extract_docx(data)
        elif kind == "text":
            text = self._decode_text(data)
        else:
            text = ""
        return self._limit(text)

    def _limit(self, text: str) -> str:
        if self.max_chars is None:
            return text
        return text[: self.max_chars]

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                if doc.needs_pass:
                    raise ExtractionError("PDF is password protected")
                if doc.page_count == 0:
                    raise ExtractionError("PDF has no pages")
                chunks = [page.get_text("text").strip() for page in doc]
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"Unable to parse PDF: {exc}") from exc
        return "\n".join(chunk for chunk in chunks if chunk)

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        try:
            document = Document(io.BytesIO(data))
        except Exception as exc:
            raise ExtractionError(f"Unable to parse DOCX: {exc}") from exc
        chunks = [paragraph.text.strip() for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    chunks.append("\t".join(cells))
        return "\n".join(chunk for chunk in chunks if chunk)

    @staticmethod
    def _decode_text(data: bytes) -> str:
        for encoding in _TEXT_ENCODINGS:
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
        raise ExtractionError("Unable to decode text payload")  # pragma: no cover - latin-1 always decodes


__all__ = ["DEFAULT_MAX_CHARS", "DocumentExtractor", "ExtractionError", "Extractor", "sniff_format"]
