"""
Unit tests for DownloadManager.
"""

import shutil
import tempfile
import threading
import unittest
from pathlib import Path
from typing import Dict, List
from unittest.mock import MagicMock

from download.DownloadManager import (
    STATUS_PERSIST_FAILED,
    STATUS_SAVED,
    STATUS_TRANSFER_FAILED,
    DownloadManager,
)
from download.progress import ProgressUpdate, compute_progress
from storage.FileRecord import FileRecord, StorageTier
from storage.StorageKeyValue import StorageKeyValue
from storage.StorageSQLLite import StorageSQLLite
from storage.TieringManager import TieringManager
from utils.Errors import PersistenceError, TransferError
from utils.Logger import Logger


class _FakeDownloader:
    """Returns a payload per URL, reporting progress in chunks; URLs in `fail` raise."""

    def __init__(self, sizes: Dict[str, int], fail: Dict[str, Exception] = None) -> None:
        self.sizes = sizes
        self.fail = fail or {}

    def download(self, url, progress_callback=None):
        if url in self.fail:
            raise self.fail[url]
        size = self.sizes[url]
        for received in range(0, size + 1, max(1, size // 4)):
            if progress_callback:
                progress_callback(compute_progress(url, received, size))
        payload = b"z" * size
        if progress_callback:
            progress_callback(compute_progress(url, size, size, done=True))
        return FileRecord(url=url, file_name=url.rsplit("/", 1)[-1], size=size, payload=payload)


class TestDownloadManager(unittest.TestCase):
    """Test cases for DownloadManager."""

    def setUp(self) -> None:
        Logger.initialize(log_level="WARNING", log_file=False)
        self.temp_dir = Path(tempfile.mkdtemp())
        self.small = StorageKeyValue()
        self.small.initialize(self.temp_dir / "small.json")
        self.large = StorageSQLLite()
        self.large.initialize(self.temp_dir / "large.db")
        self.tiering = TieringManager(self.small, self.large, threshold=1000)

    def tearDown(self) -> None:
        self.small.close()
        self.large.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_saved_outcome(self) -> None:
        manager = DownloadManager(_FakeDownloader({"https://x.org/a.pdf": 100}), self.tiering)
        outcome = manager.run("https://x.org/a.pdf")
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.status, STATUS_SAVED)
        self.assertEqual(outcome.message, "Saved!")
        self.assertEqual(outcome.record.storage_tier, StorageTier.SMALL)
        self.assertIsNone(outcome.record.data_url)
        self.assertTrue(self.small.exists("https://x.org/a.pdf"))

    def test_transfer_failure_saves_nothing(self) -> None:
        downloader = _FakeDownloader({}, fail={"https://x.org/a.pdf": TransferError("Server: 404", 404)})
        outcome = DownloadManager(downloader, self.tiering).run("https://x.org/a.pdf")
        self.assertEqual(outcome.status, STATUS_TRANSFER_FAILED)
        self.assertEqual(outcome.message, "Download failed: Server: 404")
        self.assertIsNone(outcome.record)
        self.assertEqual(self.small.list_records() + self.large.list_records(), [])

    def test_persist_failure_is_reported_separately(self) -> None:
        tiering = MagicMock()
        tiering.persist.side_effect = PersistenceError("Failed to save a.pdf: quota exceeded")
        manager = DownloadManager(_FakeDownloader({"https://x.org/a.pdf": 10}), tiering)
        outcome = manager.run("https://x.org/a.pdf")
        self.assertEqual(outcome.status, STATUS_PERSIST_FAILED)
        self.assertTrue(outcome.message.startswith("Downloaded but not saved"))
        self.assertIsNone(outcome.record.payload)

    def test_current_url_cleared_after_run(self) -> None:
        downloader = _FakeDownloader({}, fail={"https://x.org/a.pdf": TransferError("boom")})
        DownloadManager(downloader, self.tiering).run("https://x.org/a.pdf")
        self.assertIsNone(getattr(Logger._thread_local, "url", None))

    def test_concurrent_progress_is_isolated(self) -> None:
        """Each download's callback sees only its own URL, and its received bytes only grow."""
        sizes = {"https://x.org/small.mp3": 400, "https://x.org/big.mp4": 4000, "https://x.org/mid.pdf": 900}
        seen: Dict[str, List[ProgressUpdate]] = {url: [] for url in sizes}
        lock = threading.Lock()

        def factory(url):
            def callback(update: ProgressUpdate) -> None:
                with lock:
                    seen[url].append(update)
            return callback

        manager = DownloadManager(_FakeDownloader(sizes), self.tiering, max_workers=3)
        outcomes = manager.run_many(list(sizes), factory)

        self.assertEqual([o.url for o in outcomes], list(sizes))
        self.assertTrue(all(o.ok for o in outcomes))
        for url, updates in seen.items():
            self.assertTrue(all(u.url == url for u in updates))
            received = [u.received for u in updates]
            self.assertEqual(received, sorted(received))
            self.assertEqual(received[-1], sizes[url])
            self.assertTrue(updates[-1].done)
        self.assertTrue(self.large.exists("https://x.org/big.mp4"))
        self.assertTrue(self.small.exists("https://x.org/mid.pdf"))

    def test_one_failure_does_not_stop_others(self) -> None:
        downloader = _FakeDownloader(
            {"https://x.org/ok.pdf": 10},
            fail={"https://x.org/bad.pdf": TransferError("Server: 500", 500)},
        )
        manager = DownloadManager(downloader, self.tiering, max_workers=2)
        outcomes = manager.run_many(["https://x.org/bad.pdf", "https://x.org/ok.pdf"], lambda _u: None)
        self.assertEqual([o.status for o in outcomes], [STATUS_TRANSFER_FAILED, STATUS_SAVED])

    def test_max_workers_floor(self) -> None:
        self.assertEqual(DownloadManager(MagicMock(), self.tiering, max_workers=0).max_workers, 1)


if __name__ == "__main__":
    unittest.main()
