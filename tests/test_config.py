import json
import logging
import tempfile
import unittest
from pathlib import Path

from core.config import load_config
from core.exceptions import ConfigError


class TestConfig(unittest.TestCase):
    def _write(self, tmpdir: str, data) -> str:
        config_path = Path(tmpdir) / "config.json"
        config_path.write_text(json.dumps(data))
        return str(config_path)

    def test_missing_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_config(str(Path(tmpdir) / "missing.json"))

            self.assertEqual(config.data_dir, "content")
            self.assertEqual(config.apps.apps_dir, "content/apps")
            self.assertEqual(config.apps.log_dir, "content/logs")
            self.assertEqual(config.apps.enabled_map, {})
            self.assertEqual(config.apps.level, logging.INFO)

    def test_dirs_default_under_data_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            data_dir = Path(tmpdir) / "data"
            config = load_config(self._write(tmpdir, {"data_dir": str(data_dir)}))

            self.assertEqual(config.apps.apps_dir, str(data_dir / "apps"))
            self.assertEqual(config.apps.log_dir, str(data_dir / "logs"))

    def test_apps_settings(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_config(self._write(tmpdir, {
                "apps": {
                    "apps_dir": "custom/apps",
                    "enabled": {"reading-time": False, " seo ": True},
                    "log_level": "debug",
                },
            }))

            self.assertEqual(config.apps.apps_dir, "custom/apps")
            self.assertEqual(config.apps.enabled_map, {"reading-time": False, "seo": True})
            self.assertFalse(config.apps.is_enabled("reading-time"))
            self.assertTrue(config.apps.is_enabled("unknown"))
            self.assertEqual(config.apps.log_level, "DEBUG")
            self.assertEqual(config.apps.level, logging.DEBUG)

    def test_invalid_json_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            config_path.write_text("{not json")

            with self.assertRaises(ConfigError):
                load_config(str(config_path))

    def test_non_boolean_toggle_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ConfigError):
                load_config(self._write(tmpdir, {"apps": {"enabled": {"seo": "yes"}}}))

    def test_invalid_log_level_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ConfigError):
                load_config(self._write(tmpdir, {"apps": {"log_level": "LOUD"}}))

    def test_empty_apps_dir_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ConfigError):
                load_config(self._write(tmpdir, {"apps": {"apps_dir": "  "}}))

    def test_non_object_root_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ConfigError):
                load_config(self._write(tmpdir, ["apps"]))
