"""Top-level configuration loader."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("config/default.yaml")

AUTH_TYPES = ("none", "basic", "digest", "ntlm")


@lru_cache(maxsize=1)
def load_app_config(path: str | Path | None = None) -> Dict[str, Any]:
    """Load application configuration."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return {}
    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return data


@dataclass(frozen=True)
class ServiceSettings:
    """Process-wide settings, fixed at start-up."""

    threads: int = 8
    socket_timeout: float = 120.0
    connection_timeout: float = 10.0
    source_property: str = "url"
    target_property: str = "_content"
    auth_type: str = "basic"
    username: Optional[str] = None
    password: Optional[str] = None
    domain: Optional[str] = None
    workstation: Optional[str] = None
    trust_everything: bool = False
    use_compression: bool = True
    max_connections_per_route: int = 30
    max_content_chars: int = 100_000
    poll_interval: float = 0.1
    fatal_on_transport_error: bool = False
    fatal_on_extraction_error: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000

    @property
    def timeout(self) -> tuple[float, float]:
        """``(connect, read)`` pair in the shape ``requests`` expects."""
        return (self.connection_timeout, self.socket_timeout)


def _coerce(raw: Any, default: Any) -> Any:
    # Unparseable values fall back to the default rather than failing start-up.
    if raw is None:
        return default
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() == "true"
    if isinstance(default, int):
        try:
            return int(str(raw).strip())
        except ValueError:
            return default
    if isinstance(default, float):
        try:
            return float(str(raw).strip())
        except ValueError:
            return default
    return str(raw)


def load_settings(
    path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceSettings:
    """Build settings from defaults, the YAML ``service`` section and the environment.

    Environment variables win over the YAML file. Keys are the upper-cased
    field names (``THREADS``, ``SOCKET_TIMEOUT``, ``AUTH_TYPE``...), with
    ``CONNECTION_TIMEOUT`` for the connect timeout.
    """
    env = os.environ if environ is None else environ
    config_path = path or env.get("CONFIG_PATH")
    app_config = load_app_config(config_path) if config_path else load_app_config()
    section = app_config.get("service", {}) if isinstance(app_config, Mapping) else {}
    if not isinstance(section, Mapping):
        section = {}

    defaults = ServiceSettings()
    values: Dict[str, Any] = {}
    for field in fields(ServiceSettings):
        default = getattr(defaults, field.name)
        raw = env.get(field.name.upper())
        if raw is None:
            raw = section.get(field.name)
        if default is None:
            values[field.name] = str(raw) if raw is not None else None
        else:
            values[field.name] = _coerce(raw, default)

    values["auth_type"] = str(values["auth_type"]).lower()
    values["threads"] = max(1, values["threads"])
    return ServiceSettings(**values)


__all__ = ["AUTH_TYPES", "DEFAULT_CONFIG_PATH", "ServiceSettings", "load_app_config", "load_settings"]
