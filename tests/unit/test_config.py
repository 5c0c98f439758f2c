import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from watchlog.config import Config
from watchlog.exceptions import ConfigError
from watchlog.jikan import DEFAULT_JIKAN_URL


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "watchlog.yaml"

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_env_and_file(self.path)

        self.assertEqual(config.jikan_url, DEFAULT_JIKAN_URL)
        self.assertEqual(config.request_delay, 0.3)
        self.assertIsNone(config.max_run_seconds)
        self.assertEqual(config.schedule_interval, 6)
        self.assertEqual(config.schedule_unit, "hours")

    def test_file_values(self):
        self.path.write_text(
            "database_path: /tmp/w.db\nuser_id: alice\nrequest_delay: 1.5\n",
            encoding="utf-8",
        )

        config = Config.from_file(self.path)

        self.assertEqual(config.database_path, "/tmp/w.db")
        self.assertEqual(config.user_id, "alice")
        self.assertEqual(config.request_delay, 1.5)

    def test_environment_overrides_file(self):
        self.path.write_text("user_id: alice\n", encoding="utf-8")
        env = {"WATCHLOG_USER": "bob", "MAX_RUN_SECONDS": "120", "WATCHLOG_DB": "x.db"}

        with patch.dict(os.environ, env, clear=True):
            config = Config.from_env_and_file(self.path)

        self.assertEqual(config.user_id, "bob")
        self.assertEqual(config.max_run_seconds, 120.0)
        self.assertEqual(config.database_path, "x.db")

    def test_bad_number_in_environment(self):
        with patch.dict(os.environ, {"REQUEST_DELAY": "fast"}, clear=True):
            with self.assertRaises(ConfigError):
                Config.from_env_and_file(self.path)

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            Config.from_file(self.path)

    def test_unknown_key(self):
        self.path.write_text("api_key: secret\n", encoding="utf-8")
        with self.assertRaisesRegex(ConfigError, "api_key"):
            Config.from_file(self.path)

    def test_validation(self):
        for overrides in (
            {"request_delay": 0.1},
            {"request_timeout": 0},
            {"max_run_seconds": -1},
            {"user_id": ""},
            {"schedule_unit": "fortnights"},
            {"schedule_interval": 0},
        ):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ConfigError):
                    Config(**overrides).validate()

    def test_round_trip_through_file(self):
        Config(user_id="carol", max_run_seconds=60).to_file(self.path)
        config = Config.from_file(self.path)
        self.assertEqual(config.user_id, "carol")
        self.assertEqual(config.max_run_seconds, 60)


if __name__ == "__main__":
    unittest.main()
