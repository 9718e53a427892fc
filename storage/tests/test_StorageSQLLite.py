"""
Unit tests for the StorageSQLLite (LARGE tier) implementation.
"""

import shutil
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from storage.FileRecord import FileRecord, StorageTier
from storage.StorageSQLLite import StorageSQLLite
from utils.Errors import StorageError
from utils.Logger import Logger


def _record(url: str = "https://example.com/v/clip.mp4", payload: bytes = b"\x00\xff" * 10) -> FileRecord:
    return FileRecord(
        url=url,
        file_name=url.rsplit("/", 1)[-1],
        content_type="video/mp4",
        size=len(payload),
        last_modified=datetime(2024, 6, 2, 8, 30, tzinfo=timezone.utc),
        payload=payload,
    )


class TestStorageSQLLite(unittest.TestCase):
    """Test cases for StorageSQLLite class."""

    def setUp(self) -> None:
        Logger.initialize(log_level="WARNING", log_file=False)
        self.temp_dir = Path(tempfile.mkdtemp())
        self.test_db_path = self.temp_dir / "large.db"
        self.storage = StorageSQLLite()
        self.storage.initialize(self.test_db_path)

    def tearDown(self) -> None:
        self.storage.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_initialize_creates_schema(self) -> None:
        """Initialization creates the files table keyed by url."""
        cursor = self.storage._connection.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='files'"
        )
        self.assertEqual(cursor.fetchone()[0], "files")
        self.assertEqual(self.storage.get_db_path(), self.test_db_path)

    def test_initialize_sets_full_sync(self) -> None:
        """Writes are durable on commit."""
        mode = self.storage._connection.execute("PRAGMA synchronous").fetchone()[0]
        self.assertEqual(mode, 2)  # FULL

    def test_put_and_get_round_trip(self) -> None:
        """get() returns the exact bytes that were stored."""
        self.storage.put(_record())
        record = self.storage.get("https://example.com/v/clip.mp4")
        self.assertEqual(record.payload, b"\x00\xff" * 10)
        self.assertEqual(record.size, 20)
        self.assertEqual(record.content_type, "video/mp4")
        self.assertEqual(record.storage_tier, StorageTier.LARGE)
        self.assertEqual(record.last_modified, datetime(2024, 6, 2, 8, 30, tzinfo=timezone.utc))

    def test_row_has_storage_label(self) -> None:
        self.storage.put(_record())
        row = self.storage._connection.execute("SELECT storage FROM files").fetchone()
        self.assertEqual(row[0], "indexedDB")

    def test_put_same_url_replaces(self) -> None:
        self.storage.put(_record(payload=b"a" * 3))
        self.storage.put(_record(payload=b"b" * 5))
        records = self.storage.list_records()
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].size, 5)

    def test_list_records_does_not_load_payload(self) -> None:
        self.storage.put(_record())
        records = self.storage.list_records()
        self.assertIsNone(records[0].payload)

    def test_put_without_payload_raises(self) -> None:
        record = _record()
        record.payload = None
        with self.assertRaises(ValueError):
            self.storage.put(record)

    def test_delete(self) -> None:
        self.storage.put(_record())
        self.assertTrue(self.storage.exists("https://example.com/v/clip.mp4"))
        self.assertTrue(self.storage.delete("https://example.com/v/clip.mp4"))
        self.assertFalse(self.storage.delete("https://example.com/v/clip.mp4"))
        self.assertFalse(self.storage.exists("https://example.com/v/clip.mp4"))

    def test_clear_all_records(self) -> None:
        self.storage.put(_record("https://example.com/1.mp4"))
        self.storage.put(_record("https://example.com/2.mp4"))
        self.storage.clear_all_records()
        self.assertEqual(self.storage.list_records(), [])

    def test_closed_store_raises_storage_error(self) -> None:
        self.storage.close()
        with self.assertRaises(StorageError):
            self.storage.list_records()

    def test_get_db_path_requires_open_store(self) -> None:
        self.assertEqual(self.storage.get_db_path(), self.test_db_path)
        self.storage.close()
        with self.assertRaises(StorageError):
            self.storage.get_db_path()
        with self.assertRaises(StorageError):
            StorageSQLLite().get_db_path()

    def test_initialize_unopenable_path_raises(self) -> None:
        """A directory in place of the database file cannot be opened."""
        blocked = self.temp_dir / "dir.db"
        blocked.mkdir()
        with self.assertRaises(StorageError):
            StorageSQLLite().initialize(blocked)


if __name__ == "__main__":
    unittest.main()
