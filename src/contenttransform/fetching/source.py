"""Content-source classification and URL normalization."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Iterable, Tuple, Union
from urllib.parse import urlsplit, urlunsplit

DEFAULT_ALLOWED_SCHEMES: Tuple[str, ...] = ("http", "https")

EMBEDDED_PREFIX = "~b"
REFERENCE_PREFIX = "~r"


class ResolutionError(ValueError):
    """Raised when a content-source string cannot be turned into a source."""


class InvalidEncoding(ResolutionError):
    """Raised when an embedded payload is not valid base64."""


class UnsupportedScheme(ResolutionError):
    """Raised when a URL is malformed or uses a scheme outside the allow-list."""


@dataclass(frozen=True)
class EmbeddedSource:
    """Bytes carried inline in the record."""

    data: bytes


@dataclass(frozen=True)
class RemoteSource:
    """A validated http(s) location."""

    url: str

    def __post_init__(self) -> None:
        split = urlsplit(self.url)
        scheme = split.scheme.lower()
        if scheme not in DEFAULT_ALLOWED_SCHEMES:
            raise UnsupportedScheme(f"Scheme '{scheme}' not allowed: {self.url}")
        if not split.hostname:
            raise UnsupportedScheme(f"URL has no host: {self.url}")


ContentSource = Union[EmbeddedSource, RemoteSource]


def resolve_source(raw: str, *, allowed_schemes: Iterable[str] = DEFAULT_ALLOWED_SCHEMES) -> ContentSource:
    """Classify ``raw`` as embedded bytes or a remote URL."""
    if raw.startswith(EMBEDDED_PREFIX):
        payload = raw[len(EMBEDDED_PREFIX):]
        # Missing "=" padding is accepted; characters outside the alphabet are not.
        padded = payload + "=" * (-len(payload) % 4)
        try:
            return EmbeddedSource(base64.b64decode(padded, validate=True))
        except (binascii.Error, ValueError) as exc:
            raise InvalidEncoding(f"Invalid Base64 encoded string ({len(payload)} chars)") from exc

    url = raw[len(REFERENCE_PREFIX):] if raw.startswith(REFERENCE_PREFIX) else raw
    return RemoteSource(normalize_url(url, allowed_schemes=allowed_schemes))


def normalize_url(url: str, *, allowed_schemes: Iterable[str] = DEFAULT_ALLOWED_SCHEMES) -> str:
    """Return ``url`` with lower-cased scheme/host, no default port and no fragment."""
    if not url:
        raise UnsupportedScheme("URL must be non-empty")
    if any(ch.isspace() for ch in url):
        raise UnsupportedScheme(f"URL contains whitespace: '{url}'")

    try:
        split = urlsplit(url)
        split.port  # raises ValueError on a non-numeric port
    except ValueError as exc:
        raise UnsupportedScheme(f"Malformed URL: '{url}'") from exc

    scheme = split.scheme.lower()
    allowed = tuple(s.lower() for s in allowed_schemes)
    if not scheme or scheme not in allowed:
        raise UnsupportedScheme(f"Unsupported URL schema: '{url}'")
    if not split.hostname:
        raise UnsupportedScheme(f"URL must include a host: '{url}'")

    netloc = _normalize_netloc(split.netloc, scheme)
    path = split.path or "/"
    return urlunsplit((scheme, netloc, path, split.query, ""))


def _normalize_netloc(netloc: str, scheme: str) -> str:
    userinfo = ""
    host_port = netloc
    if "@" in netloc:
        userinfo, host_port = netloc.rsplit("@", 1)

    if host_port.startswith("["):
        # IPv6 literal
        host, _, rest = host_port.partition("]")
        host = host + "]"
        port = rest[1:] if rest.startswith(":") else ""
    elif ":" in host_port:
        host, port = host_port.split(":", 1)
    else:
        host, port = host_port, ""

    host = host.lower().strip(".")
    port = port.strip()

    if (scheme == "http" and port == "80") or (scheme == "https" and port == "443"):
        port = ""

    host_port = host if not port else f"{host}:{port}"
    if userinfo:
        return f"{userinfo}@{host_port}"
    return host_port


__all__ = [
    "ContentSource",
    "DEFAULT_ALLOWED_SCHEMES",
    "EMBEDDED_PREFIX",
    "EmbeddedSource",
    "InvalidEncoding",
    "REFERENCE_PREFIX",
    "RemoteSource",
    "ResolutionError",
    "UnsupportedScheme",
    "normalize_url",
    "resolve_source",
]
