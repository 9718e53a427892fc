"""
Key/value implementation of the Storage protocol for small files.

A capacity-limited string store persisted as one JSON file. Each record is a
JSON string holding its metadata and the payload inline as a base64 data URL,
under the key file_<base64(url)>. Every write rewrites the file atomically.

This class should be obtained via Storage.small() or instantiated directly in tests.
"""

import base64
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional

from storage.FileRecord import FileRecord, StorageTier
from utils.Errors import StorageError
from utils.file_utils import decode_data_url, encode_data_url
from utils.Logger import Logger

KEY_PREFIX = "file_"
DEFAULT_CAPACITY = 5 * 1024 * 1024


def record_key(url: str) -> str:
    """Store key for a url: prefix plus base64 of the url, so reserved characters never collide."""
    return KEY_PREFIX + base64.b64encode(url.encode("utf-8")).decode("ascii")


class StorageKeyValue:
    """
    JSON-file key/value implementation of the Storage protocol (SMALL tier).

    Capacity counts characters of keys plus values, like a browser storage
    quota. A write that would exceed it fails and leaves the store unchanged.
    """

    tier = StorageTier.SMALL

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._capacity = capacity
        self._path: Optional[Path] = None
        self._items: Dict[str, str] = {}
        self._initialized = False
        self._lock = threading.RLock()

    def initialize(self, path: Optional[Path] = None) -> None:
        """
        Load the store from disk, or start empty if the file does not exist.

        Args:
            path: JSON file path. If None, uses 'downloads_small.json' in the
                current working directory.

        Raises:
            StorageError: If the file exists but cannot be read or parsed.
        """
        with self._lock:
            if self._initialized:
                return
            self._path = Path(path) if path is not None else Path.cwd() / "downloads_small.json"
            items: Dict[str, str] = {}
            if self._path.exists():
                try:
                    loaded = json.loads(self._path.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    raise StorageError(f"Cannot read key/value store {self._path}: {e}") from e
                if not isinstance(loaded, dict):
                    raise StorageError(f"Key/value store {self._path} is not a JSON object")
                items = {str(k): v for k, v in loaded.items() if isinstance(v, str)}
            self._items = items
            self._initialized = True
            Logger.debug(f"Key/value store opened: {self._path} ({len(items)} entries)")

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise StorageError("Key/value store has not been initialized. Call initialize() first.")

    def _flush(self, items: Dict[str, str]) -> None:
        """Write items to disk atomically (temp file + fsync + replace)."""
        if self._path is None:
            raise StorageError("Key/value store path is not set.")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".kv-", suffix=".json", dir=str(self._path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except OSError:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    # Raw key/value API

    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None."""
        with self._lock:
            self._ensure_initialized()
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """
        Store value under key.

        Raises:
            StorageError: If the write would exceed capacity or the file cannot be written.
        """
        with self._lock:
            self._ensure_initialized()
            used = self.used_capacity() - (len(key) + len(self._items[key]) if key in self._items else 0)
            needed = len(key) + len(value)
            if used + needed > self._capacity:
                raise StorageError(
                    f"Key/value store quota exceeded: {used + needed} > {self._capacity} characters"
                )
            updated = dict(self._items)
            updated[key] = value
            try:
                self._flush(updated)
            except OSError as e:
                raise StorageError(f"Failed to write key/value store {self._path}: {e}") from e
            self._items = updated

    def remove_item(self, key: str) -> bool:
        """Remove key; return True if it existed."""
        with self._lock:
            self._ensure_initialized()
            if key not in self._items:
                return False
            updated = dict(self._items)
            del updated[key]
            try:
                self._flush(updated)
            except OSError as e:
                raise StorageError(f"Failed to write key/value store {self._path}: {e}") from e
            self._items = updated
            return True

    def keys(self) -> List[str]:
        """All keys currently stored."""
        with self._lock:
            self._ensure_initialized()
            return list(self._items)

    def used_capacity(self) -> int:
        """Characters used by keys plus values."""
        with self._lock:
            return sum(len(k) + len(v) for k, v in self._items.items())

    # Storage protocol

    def put(self, record: FileRecord) -> None:
        """
        Store a record with its payload inline as a data URL.

        Raises:
            StorageError: On quota or write failure.
            ValueError: If the record has neither payload nor data URL.
        """
        data_url = record.data_url
        if data_url is None:
            if record.payload is None:
                raise ValueError(f"Record for {record.url} has no payload")
            data_url = encode_data_url(record.payload, record.content_type)
        value = dict(record.metadata())
        value["data"] = data_url
        value["storage"] = self.tier.value
        self.set_item(record_key(record.url), json.dumps(value))

    def _parse(self, raw: str) -> FileRecord:
        data = json.loads(raw)
        record = FileRecord.from_metadata(data, storage_tier=self.tier)
        record.data_url = str(data["data"])
        return record

    def get(self, url: str) -> Optional[FileRecord]:
        """
        Get a record with its payload decoded.

        Raises:
            StorageError: If the entry exists but is corrupt.
        """
        raw = self.get_item(record_key(url))
        if raw is None:
            return None
        try:
            record = self._parse(raw)
            record.payload = decode_data_url(record.data_url or "")
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Corrupt key/value entry for {url}: {e}") from e
        return record

    def delete(self, url: str) -> bool:
        return self.remove_item(record_key(url))

    def exists(self, url: str) -> bool:
        return self.get_item(record_key(url)) is not None

    def list_records(self) -> List[FileRecord]:
        """All readable records under the file_ prefix; corrupt entries are skipped."""
        with self._lock:
            self._ensure_initialized()
            entries = [(k, v) for k, v in self._items.items() if k.startswith(KEY_PREFIX)]
        records: List[FileRecord] = []
        for key, raw in entries:
            try:
                records.append(self._parse(raw))
            except (KeyError, TypeError, ValueError) as e:
                Logger.debug(f"Skipping unreadable key/value entry {key}: {e}")
        return records

    def clear_all_records(self) -> None:
        """Remove every file_ entry; other keys are kept."""
        with self._lock:
            self._ensure_initialized()
            kept = {k: v for k, v in self._items.items() if not k.startswith(KEY_PREFIX)}
            try:
                self._flush(kept)
            except OSError as e:
                raise StorageError(f"Failed to write key/value store {self._path}: {e}") from e
            self._items = kept
        Logger.info("All records cleared from key/value store")

    def close(self) -> None:
        with self._lock:
            self._items = {}
            self._initialized = False

    def get_path(self) -> Path:
        """Path of the backing JSON file."""
        self._ensure_initialized()
        if self._path is None:
            raise StorageError("Key/value store path is not set.")
        return self._path
