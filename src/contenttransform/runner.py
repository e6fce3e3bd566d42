"""Per-source pipeline tying together resolver, fetcher and extractor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from contenttransform.config import ServiceSettings
from contenttransform.extractors import DocumentExtractor, ExtractionError, Extractor
from contenttransform.fetching import (
    ContentFetcher,
    FetchNotFound,
    FetchTransportError,
    InvalidEncoding,
    ResolutionError,
    make_session,
    resolve_source,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailurePolicy:
    """Which recoverable failure classes should instead abort the batch.

    Unexpected HTTP statuses and unclassified errors always abort; invalid
    sources and 404s never do. Read timeouts count as unclassified errors
    whether they hit before the headers or while the body streams.
    """

    fatal_on_transport_error: bool = False
    fatal_on_extraction_error: bool = False

    @classmethod
    def from_settings(cls, settings: ServiceSettings) -> "FailurePolicy":
        return cls(
            fatal_on_transport_error=settings.fatal_on_transport_error,
            fatal_on_extraction_error=settings.fatal_on_extraction_error,
        )


class ContentRunner:
    """Resolves, fetches and extracts a single content-source string.

    ``extract`` returns the text, or ``None`` when the source is bad in a
    recoverable way. Anything that should abort the batch propagates.
    """

    def __init__(
        self,
        *,
        fetcher: ContentFetcher,
        extractor: Optional[Extractor] = None,
        policy: Optional[FailurePolicy] = None,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor or DocumentExtractor()
        self.policy = policy or FailurePolicy()

    @classmethod
    def from_settings(cls, settings: ServiceSettings) -> "ContentRunner":
        fetcher = ContentFetcher(session=make_session(settings), timeout=settings.timeout)
        return cls(
            fetcher=fetcher,
            extractor=DocumentExtractor(max_chars=settings.max_content_chars),
            policy=FailurePolicy.from_settings(settings),
        )

    def extract(self, raw: str) -> Optional[str]:
        try:
            source = resolve_source(raw)
        except InvalidEncoding as exc:
            logger.warning("%s", exc)
            return None
        except ResolutionError as exc:
            logger.warning("Invalid URL: '%s' (%s)", raw, exc)
            return None

        try:
            data = self.fetcher.fetch(source)
        except FetchNotFound as exc:
            logger.warning("%s", exc)
            return None
        except FetchTransportError as exc:
            if self.policy.fatal_on_transport_error:
                raise
            logger.warning("%s", exc)
            return None

        try:
            return self.extractor.extract(data)
        except ExtractionError:
            if self.policy.fatal_on_extraction_error:
                raise
            logger.error("Unable to extract content from '%s'", _describe(raw), exc_info=True)
            return None


def _describe(raw: str, limit: int = 120) -> str:
    # Embedded payloads can be megabytes of base64.
    return raw if len(raw) <= limit else raw[:limit] + "..."


__all__ = ["ContentRunner", "FailurePolicy"]
