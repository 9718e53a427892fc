"""
Unit tests for Args module.
"""

import json
import sys
import tempfile
import unittest
from io import StringIO
from pathlib import Path

from utils.Args import Args


class TestArgs(unittest.TestCase):
    """Test cases for Args class."""

    def setUp(self) -> None:
        """Reset Args state before each test."""
        self._original_argv = sys.argv.copy()
        Args.reset()

    def tearDown(self) -> None:
        """Restore original argv after each test."""
        sys.argv = self._original_argv
        Args.reset()

    def test_initialize_default(self) -> None:
        """Test Args initialization with default values."""
        sys.argv = ["test", "noop"]
        Args.initialize()
        self.assertTrue(Args._initialized)
        self.assertEqual(Args.log_level, "INFO")
        self.assertEqual(Args.module, "noop")
        self.assertIsNone(Args.target)

    def test_download_defaults(self) -> None:
        """Storage and download defaults are present."""
        sys.argv = ["test", "noop"]
        Args.initialize()
        self.assertEqual(Args.server_url, "http://127.0.0.1:3000")
        self.assertEqual(Args.size_threshold, 1024 * 1024)
        self.assertEqual(Args.small_store_capacity, 5 * 1024 * 1024)
        self.assertEqual(Args.proxy_timeout_sec, 30)
        self.assertTrue(Args.keywords_file.endswith("data.json"))

    def test_target_and_options(self) -> None:
        sys.argv = [
            "test", "download", "music",
            "--server-url", "http://localhost:4000/",
            "-w", "2",
            "--no-browser",
            "-y",
        ]
        Args.initialize()
        self.assertEqual(Args.module, "download")
        self.assertEqual(Args.target, "music")
        self.assertEqual(Args.server_url, "http://localhost:4000")
        self.assertEqual(Args.max_workers, 2)
        self.assertFalse(Args.open_browser)
        self.assertTrue(Args.assume_yes)

    def test_initialize_with_config_file(self) -> None:
        """Test Args initialization with config file."""
        sys.argv = ["test", "noop"]
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump({"log_level": "DEBUG", "max_workers": 8}, f)
            config_path = Path(f.name)

        try:
            Args.initialize(config_file=config_path)
            self.assertEqual(Args.log_level, "DEBUG")
            self.assertEqual(Args.max_workers, 8)
        finally:
            config_path.unlink()

    def test_command_line_override(self) -> None:
        """Test that command line args override config file values."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump({"log_level": "DEBUG"}, f)
            config_path = Path(f.name)

        try:
            sys.argv = ["test", "noop", "--config", str(config_path), "--log-level", "error"]
            Args.initialize()
            self.assertEqual(Args.log_level, "ERROR")
            self.assertEqual(Args.config_file, str(config_path))
        finally:
            config_path.unlink()

    def test_invalid_config_json_raises(self) -> None:
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write("{broken")
            config_path = Path(f.name)

        try:
            sys.argv = ["test", "noop"]
            with self.assertRaises(ValueError):
                Args.initialize(config_file=config_path)
        finally:
            config_path.unlink()

    def test_config_file_not_found(self) -> None:
        """Missing config file is a warning when it was named explicitly."""
        original_stderr = sys.stderr
        stderr_capture = StringIO()
        sys.stderr = stderr_capture
        try:
            sys.argv = ["test", "noop", "--config", "nonexistent.json"]
            Args.initialize()
        finally:
            sys.stderr = original_stderr

        self.assertTrue(Args._initialized)
        self.assertIn("not found", stderr_capture.getvalue())

    def test_unknown_attribute_raises(self) -> None:
        sys.argv = ["test", "noop"]
        Args.initialize()
        with self.assertRaises(AttributeError):
            Args.no_such_setting

    def test_not_initialized_error(self) -> None:
        with self.assertRaises(RuntimeError):
            Args.server_url

    def test_get_works_before_initialize(self) -> None:
        """get() falls back to defaults so library code runs without a command line."""
        self.assertEqual(Args.get("max_workers"), 4)
        self.assertEqual(Args.get("missing", "fallback"), "fallback")

    def test_get_args_returns_only_given_values(self) -> None:
        sys.argv = ["test", "list", "--sort", "date-desc"]
        Args.initialize()
        self.assertEqual(Args.get_args(), {"module": "list", "sort": "date-desc"})
        self.assertEqual(Args.get_config()["sort"], "date-desc")


if __name__ == "__main__":
    unittest.main()
