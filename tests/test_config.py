"""Tests for configuration loading."""

from __future__ import annotations

import os
import pathlib
import tempfile
import textwrap
import unittest
from unittest import mock

from labelbot.config import ConfigLoader, ConfigLoaderException
from labelbot.config.models import AppConfig, FundingConfig, PortalConfig
from labelbot.core.exceptions import InvalidConfigException


class ConfigLoaderTests(unittest.TestCase):

    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        cleaned = {k: v for k, v in os.environ.items() if not k.startswith("LABELBOT_")}
        patcher = mock.patch.dict(os.environ, cleaned, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _write(self, content: str) -> pathlib.Path:
        path = pathlib.Path(self.tmpdir.name) / "config.yaml"
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    def test_missing_file_gives_defaults(self) -> None:
        config = ConfigLoader.load(pathlib.Path(self.tmpdir.name) / "absent.yaml", use_dotenv=False)

        self.assertEqual(config.scheduler.refresh_interval_seconds, 900)
        self.assertEqual(config.scheduler.topup_interval_seconds, 300)
        self.assertEqual(config.sessions.fresh_minutes, 5)
        self.assertEqual(config.funding.balance_floor, 500)
        self.assertEqual((config.funding.min_amount, config.funding.max_amount), (10, 500))
        self.assertEqual(config.queues.session_retries, 1)
        self.assertEqual(config.queues.label_retries, 0)
        self.assertFalse(config.telegram.enabled)
        self.assertFalse(config.ai.enabled)

    def test_yaml_then_environment(self) -> None:
        path = self._write("""
            environment: test
            logging:
              level: debug
            redis:
              url: redis://localhost:6379/1
            funding:
              balance_floor: 300
            scheduler:
              refresh_interval_seconds: 600
        """)
        env = {
            "LABELBOT_BALANCE_FLOOR": "250",
            "LABELBOT_HEADLESS": "false",
            "LABELBOT_BOT_TOKEN": "123:abc",
        }

        with mock.patch.dict(os.environ, env):
            config = ConfigLoader.load(path, use_dotenv=False)

        self.assertEqual(config.environment, "test")
        self.assertEqual(config.logging.level, "DEBUG")
        self.assertEqual(config.redis.url, "redis://localhost:6379/1")
        self.assertEqual(config.scheduler.refresh_interval_seconds, 600)
        self.assertEqual(config.funding.balance_floor, 250)
        self.assertFalse(config.browser.headless)
        self.assertTrue(config.telegram.enabled)

    def test_invalid_environment_value(self) -> None:
        with mock.patch.dict(os.environ, {"LABELBOT_REDIS_PORT": "not-a-port"}):
            with self.assertRaises(ConfigLoaderException):
                ConfigLoader.load(pathlib.Path(self.tmpdir.name) / "absent.yaml", use_dotenv=False)

    def test_invalid_section_is_reported(self) -> None:
        path = self._write("""
            funding:
              min_amount: 600
              max_amount: 500
        """)

        with self.assertRaises(ConfigLoaderException):
            ConfigLoader.load(path, use_dotenv=False)

    def test_top_level_must_be_mapping(self) -> None:
        path = self._write("- just\n- a list\n")

        with self.assertRaises(ConfigLoaderException):
            ConfigLoader.load(path, use_dotenv=False)


class ConfigModelTests(unittest.TestCase):

    def test_unknown_keys_are_ignored(self) -> None:
        config = AppConfig.from_dict({"portal": {"base_url": "https://portal.example/", "colour": "blue"}})

        self.assertEqual(config.portal.base_url, "https://portal.example")

    def test_proxy_is_applied_to_both_schemes(self) -> None:
        portal = PortalConfig(proxy_url="http://proxy.local:8080")

        self.assertEqual(portal.proxies, {"http": "http://proxy.local:8080", "https": "http://proxy.local:8080"})
        self.assertIsNone(PortalConfig().proxies)

    def test_bad_values_raise(self) -> None:
        with self.assertRaises(InvalidConfigException):
            FundingConfig(min_amount=0)
        with self.assertRaises(InvalidConfigException):
            AppConfig(environment="staging")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
