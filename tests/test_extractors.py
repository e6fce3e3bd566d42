from __future__ import annotations

import io
import unittest

import fitz
from docx import Document

import tests._path  # noqa: F401

from contenttransform.extractors import DocumentExtractor, ExtractionError, HTMLExtractor, sniff_format


def make_pdf(text: str) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_docx(*paragraphs: str) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class HTMLExtractorTests(unittest.TestCase):
    def test_strips_markup_and_scripts(self) -> None:
        document = b"""
        <html>
          <head><title>Quarterly report</title><style>p { color: red }</style></head>
          <body>
            <script>var tracking = 1;</script>
            <h1>Results</h1>
            <p>Revenue went up.</p>
          </body>
        </html>
        """
        text = HTMLExtractor().extract(document)
        self.assertEqual(text.splitlines(), ["Quarterly report", "Results", "Revenue went up."])
        self.assertNotIn("tracking", text)
        self.assertNotIn("color", text)

    def test_max_chars(self) -> None:
        text = HTMLExtractor(max_chars=5).extract(b"<html><body><p>abcdefghij</p></body></html>")
        self.assertEqual(text, "abcde")


class SniffFormatTests(unittest.TestCase):
    def test_formats(self) -> None:
        self.assertEqual(sniff_format(b"%PDF-1.7 ..."), "pdf")
        self.assertEqual(sniff_format(b"  <!DOCTYPE html><html></html>"), "html")
        self.assertEqual(sniff_format(b"plain words"), "text")
        self.assertEqual(sniff_format(b"\x89PNG\r\n\x1a\n\x00\x00"), "binary")
        self.assertEqual(sniff_format(b"PK\x03\x04not really a zip"), "binary")


class DocumentExtractorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.extractor = DocumentExtractor()

    def test_empty_payload(self) -> None:
        self.assertEqual(self.extractor.extract(b""), "")

    def test_plain_text_utf8_with_bom(self) -> None:
        self.assertEqual(self.extractor.extract("\ufeffhej på deg".encode("utf-8")), "hej på deg")

    def test_plain_text_legacy_encoding(self) -> None:
        self.assertEqual(self.extractor.extract("café".encode("cp1252")), "café")

    def test_html(self) -> None:
        self.assertEqual(self.extractor.extract(b"<html><body><p>hello</p></body></html>"), "hello")

    def test_pdf(self) -> None:
        self.assertIn("hello pdf", self.extractor.extract(make_pdf("hello pdf")))

    def test_corrupt_pdf_raises(self) -> None:
        with self.assertRaises(ExtractionError):
            self.extractor.extract(b"%PDF-1.4 this is not a real pdf")

    def test_docx(self) -> None:
        text = self.extractor.extract(make_docx("First paragraph", "Second paragraph"))
        self.assertEqual(text, "First paragraph\nSecond paragraph")

    def test_unknown_binary_is_empty(self) -> None:
        self.assertEqual(self.extractor.extract(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"), "")

    def test_output_is_capped(self) -> None:
        extractor = DocumentExtractor(max_chars=4)
        self.assertEqual(extractor.extract(b"0123456789"), "0123")

    def test_repeat_extraction_is_stable(self) -> None:
        data = make_pdf("same bytes")
        self.assertEqual(self.extractor.extract(data), self.extractor.extract(data))


if __name__ == "__main__":
    unittest.main()
