from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

import tests._path  # noqa: F401

from contenttransform.config import ServiceSettings, load_app_config, load_settings


class LoadSettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        load_app_config.cache_clear()
        self.addCleanup(load_app_config.cache_clear)
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write_config(self, text: str) -> Path:
        path = Path(self.tmpdir.name) / "service.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_defaults_without_file_or_environment(self) -> None:
        missing = Path(self.tmpdir.name) / "absent.yaml"
        settings = load_settings(missing, environ={})
        self.assertEqual(settings, ServiceSettings())
        self.assertEqual(settings.threads, 8)
        self.assertEqual(settings.timeout, (10.0, 120.0))
        self.assertEqual((settings.source_property, settings.target_property), ("url", "_content"))
        self.assertEqual(settings.auth_type, "basic")
        self.assertFalse(settings.trust_everything)

    def test_yaml_section_is_applied(self) -> None:
        path = self.write_config("service:\n  threads: 3\n  target_property: text\n  trust_everything: true\n")
        settings = load_settings(path, environ={})
        self.assertEqual(settings.threads, 3)
        self.assertEqual(settings.target_property, "text")
        self.assertTrue(settings.trust_everything)

    def test_environment_overrides_yaml(self) -> None:
        path = self.write_config("service:\n  threads: 3\n  auth_type: digest\n")
        environ = {
            "THREADS": "16",
            "SOCKET_TIMEOUT": "30",
            "CONNECTION_TIMEOUT": "2",
            "AUTH_TYPE": "NTLM",
            "USERNAME": "svc",
            "PASSWORD": "pw",
            "DOMAIN": "CORP",
            "TRUST_EVERYTHING": "TRUE",
            "SOURCE_PROPERTY": "link",
            "FATAL_ON_TRANSPORT_ERROR": "true",
        }
        settings = load_settings(path, environ=environ)
        self.assertEqual(settings.threads, 16)
        self.assertEqual(settings.timeout, (2.0, 30.0))
        self.assertEqual(settings.auth_type, "ntlm")
        self.assertEqual((settings.username, settings.password, settings.domain), ("svc", "pw", "CORP"))
        self.assertIsNone(settings.workstation)
        self.assertTrue(settings.trust_everything)
        self.assertEqual(settings.source_property, "link")
        self.assertTrue(settings.fatal_on_transport_error)

    def test_invalid_values_fall_back_to_defaults(self) -> None:
        missing = Path(self.tmpdir.name) / "absent.yaml"
        settings = load_settings(missing, environ={"THREADS": "many", "SOCKET_TIMEOUT": "", "TRUST_EVERYTHING": "yes"})
        self.assertEqual(settings.threads, 8)
        self.assertEqual(settings.socket_timeout, 120.0)
        self.assertFalse(settings.trust_everything)

    def test_thread_count_is_at_least_one(self) -> None:
        missing = Path(self.tmpdir.name) / "absent.yaml"
        self.assertEqual(load_settings(missing, environ={"THREADS": "0"}).threads, 1)


if __name__ == "__main__":
    unittest.main()
