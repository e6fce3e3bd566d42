"""Source resolution and outbound fetching."""

from .client import ClientBuilder, make_session
from .fetcher import ContentFetcher, FetchError, FetchHTTPError, FetchNotFound, FetchTransportError
from .source import (
    ContentSource,
    EmbeddedSource,
    InvalidEncoding,
    RemoteSource,
    ResolutionError,
    UnsupportedScheme,
    normalize_url,
    resolve_source,
)

__all__ = [
    "ClientBuilder",
    "make_session",
    "ContentFetcher",
    "FetchError",
    "FetchHTTPError",
    "FetchNotFound",
    "FetchTransportError",
    "ContentSource",
    "EmbeddedSource",
    "RemoteSource",
    "ResolutionError",
    "InvalidEncoding",
    "UnsupportedScheme",
    "normalize_url",
    "resolve_source",
]
