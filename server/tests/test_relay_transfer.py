"""
End-to-end tests for downloads relayed by a running proxy server.
"""

import logging
import shutil
import tempfile
import threading
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests
from werkzeug.serving import make_server

from download.Downloader import Downloader
from download.DownloadManager import STATUS_SAVED, STATUS_TRANSFER_FAILED, DownloadManager
from server.app import app
from server.keyword_table import KeywordTable, set_keyword_table
from storage.StorageKeyValue import StorageKeyValue
from storage.StorageSQLLite import StorageSQLLite
from storage.TieringManager import TieringManager
from utils.Logger import Logger

KNOWN_URL = "https://files.example.com/media/track.mp3"


def _upstream(chunks, error=None) -> MagicMock:
    """Upstream response without Content-Length that yields chunks, then optionally fails."""

    def body(chunk_size=None):
        for chunk in chunks:
            yield chunk
        if error is not None:
            raise error

    resp = MagicMock()
    resp.status_code = 200
    resp.ok = True
    resp.headers = {"Content-Type": "audio/mpeg"}
    resp.iter_content.side_effect = body
    return resp


class TestRelayTransfer(unittest.TestCase):
    """Downloader and DownloadManager against the proxy served over HTTP."""

    def setUp(self) -> None:
        Logger.initialize(log_level="WARNING", log_file=False)
        werkzeug_logger = logging.getLogger("werkzeug")
        self._werkzeug_level = werkzeug_logger.level
        werkzeug_logger.setLevel(logging.CRITICAL)

        set_keyword_table(KeywordTable({"music": [KNOWN_URL]}))
        self.server = make_server("127.0.0.1", 0, app, threaded=True)
        self.server_thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.server_thread.start()

        self.temp_dir = Path(tempfile.mkdtemp())
        self.small = StorageKeyValue()
        self.small.initialize(self.temp_dir / "small.json")
        self.large = StorageSQLLite()
        self.large.initialize(self.temp_dir / "large.db")

        session = requests.Session()
        session.trust_env = False
        self.addCleanup(session.close)
        downloader = Downloader(f"http://127.0.0.1:{self.server.server_port}", session=session, timeout_sec=10)
        self.manager = DownloadManager(downloader, TieringManager(self.small, self.large))

    def tearDown(self) -> None:
        self.server.shutdown()
        self.server.server_close()
        self.server_thread.join(timeout=5)
        set_keyword_table(None)
        self.small.close()
        self.large.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        logging.getLogger("werkzeug").setLevel(self._werkzeug_level)

    @patch("server.api.fetch_upstream")
    def test_complete_relay_is_saved(self, mock_fetch) -> None:
        mock_fetch.return_value = _upstream([b"a" * 600, b"b" * 400])

        outcome = self.manager.run(KNOWN_URL)

        self.assertEqual(outcome.status, STATUS_SAVED)
        self.assertEqual(self.small.get(KNOWN_URL).payload, b"a" * 600 + b"b" * 400)

    @patch("server.api.fetch_upstream")
    def test_upstream_failure_mid_stream_is_transfer_failure(self, mock_fetch) -> None:
        """A body cut short upstream is never saved as a complete download."""
        mock_fetch.return_value = _upstream([b"x" * 1000], error=requests.ConnectionError("reset by peer"))

        outcome = self.manager.run(KNOWN_URL)

        self.assertEqual(outcome.status, STATUS_TRANSFER_FAILED)
        self.assertTrue(outcome.message.startswith("Download failed"))
        self.assertFalse(self.small.exists(KNOWN_URL))
        self.assertFalse(self.large.exists(KNOWN_URL))


if __name__ == "__main__":
    unittest.main()
