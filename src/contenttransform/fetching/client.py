"""Builder for the shared, pooled HTTP session."""

from __future__ import annotations

import logging
from typing import Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter
from requests.auth import AuthBase, HTTPBasicAuth, HTTPDigestAuth

from contenttransform.config import AUTH_TYPES, ServiceSettings

logger = logging.getLogger(__name__)


class ClientBuilder:
    """Configures a ``requests.Session`` for outbound content fetches.

    The session is built once per process and shared by every worker; the
    connection pool behind it is sized to ``max_connections_per_route`` and
    keeps connections alive between requests.
    """

    def __init__(
        self,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        domain: Optional[str] = None,
        workstation: Optional[str] = None,
        auth_type: str = "basic",
        trust_everything: bool = False,
        use_compression: bool = True,
        max_connections_per_route: int = 30,
    ) -> None:
        if auth_type is None:
            raise ValueError("Cannot set auth_type to None")
        self.username = username
        self.password = password
        self.domain = domain
        self.workstation = workstation
        self.auth_type = auth_type.lower()
        if self.auth_type not in AUTH_TYPES:
            logger.warning("Unknown auth type '%s'; requests will not be authenticated", auth_type)
        self.trust_everything = trust_everything
        self.use_compression = use_compression
        self.max_connections_per_route = max(1, int(max_connections_per_route))

    @classmethod
    def from_settings(cls, settings: ServiceSettings) -> "ClientBuilder":
        return cls(
            username=settings.username,
            password=settings.password,
            domain=settings.domain,
            workstation=settings.workstation,
            auth_type=settings.auth_type,
            trust_everything=settings.trust_everything,
            use_compression=settings.use_compression,
            max_connections_per_route=settings.max_connections_per_route,
        )

    def build_auth(self) -> Optional[AuthBase]:
        """Return the auth handler for the configured scheme, if any."""
        if self.auth_type == "ntlm":
            from requests_ntlm import HttpNtlmAuth

            # requests-ntlm has no separate workstation argument; it derives one locally.
            user = f"{self.domain}\\{self.username}" if self.domain else (self.username or "")
            return HttpNtlmAuth(user, self.password or "")
        if self.username is None or self.password is None:
            return None
        if self.auth_type == "basic":
            return HTTPBasicAuth(self.username, self.password)
        if self.auth_type == "digest":
            return HTTPDigestAuth(self.username, self.password)
        return None

    def create(self) -> requests.Session:
        """Returns a session configured as requested."""
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=self.max_connections_per_route,
            pool_maxsize=self.max_connections_per_route,
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.auth = self.build_auth()
        session.headers["Connection"] = "Keep-Alive"
        if not self.use_compression:
            session.headers["Accept-Encoding"] = "identity"

        if self.trust_everything:
            # Trust all certificates and do no hostname verification
            session.verify = False
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            logger.warning("TLS certificate verification is disabled for outbound fetches")
        return session


def make_session(settings: ServiceSettings) -> requests.Session:
    return ClientBuilder.from_settings(settings).create()


__all__ = ["ClientBuilder", "make_session"]
