"""HTTP fetcher façade over the shared session."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import requests
from urllib3.exceptions import ReadTimeoutError

from contenttransform.fetching.source import ContentSource, EmbeddedSource, RemoteSource

logger = logging.getLogger(__name__)

# Failures that say "this source is bad" rather than "the pipeline is broken".
TRANSPORT_ERRORS: Tuple[type, ...] = (
    requests.exceptions.SSLError,
    requests.exceptions.ConnectionError,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
)


def _is_read_timeout(exc: requests.RequestException) -> bool:
    """True for a read timeout, whether raised before the headers or while streaming the body."""
    if isinstance(exc, requests.exceptions.ReadTimeout):
        return True
    # requests re-raises a body read timeout as ConnectionError wrapping urllib3's error.
    return any(isinstance(arg, ReadTimeoutError) for arg in exc.args)


class FetchError(Exception):
    """Raised when fetching a URL fails."""

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class FetchNotFound(FetchError):
    """Raised when the server answers 404."""


class FetchHTTPError(FetchError):
    """Raised when HTTP status codes indicate failure."""

    def __init__(self, status_code: int, url: str, message: str) -> None:
        super().__init__(message, url=url)
        self.status_code = int(status_code)


class FetchTransportError(FetchError):
    """Raised on TLS, DNS/connect or transport-level URL failures."""


class ContentFetcher:
    """Thin wrapper around `requests` that turns a source into raw bytes."""

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = (10.0, 120.0),
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, source: ContentSource) -> bytes:
        if isinstance(source, EmbeddedSource):
            return source.data
        if isinstance(source, RemoteSource):
            return self._get(source.url)
        raise TypeError(f"Unsupported content source: {source!r}")

    def _get(self, url: str) -> bytes:
        try:
            response = self.session.get(
                url,
                headers={"Connection": "Keep-Alive"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            if not _is_read_timeout(exc) and isinstance(exc, TRANSPORT_ERRORS):
                raise FetchTransportError(f"Invalid URL: '{url}' ({exc.__class__.__name__}: {exc})", url=url) from exc
            raise FetchError(f"Request for '{url}' failed: {exc}", url=url) from exc

        status = response.status_code
        if 200 <= status < 300:
            return response.content
        if status == 404:
            raise FetchNotFound(f"URL not found: '{url}'", url=url)
        raise FetchHTTPError(status, url, f"URL '{url}' returned status code: {status}")


__all__ = [
    "ContentFetcher",
    "FetchError",
    "FetchHTTPError",
    "FetchNotFound",
    "FetchTransportError",
    "TRANSPORT_ERRORS",
]
