"""Text extraction capability."""

from .documents import DocumentExtractor, ExtractionError, Extractor, sniff_format
from .html_clean import HTMLExtractor

__all__ = ["DocumentExtractor", "ExtractionError", "Extractor", "HTMLExtractor", "sniff_format"]
