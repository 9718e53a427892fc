"""
Storage tiering: route each downloaded record to the SMALL or LARGE store by size.

SMALL records (size <= threshold) are encoded as base64 data URLs and kept
inline in the capacity-limited key/value store. LARGE records keep their raw
bytes in the SQLite store. The tier is decided once, at write time.
"""

from dataclasses import replace
from typing import Optional

from storage.FileRecord import FileRecord, StorageTier
from storage.StorageProtocol import StorageProtocol
from utils.Errors import PersistenceError, StorageError
from utils.file_utils import encode_data_url, format_file_size
from utils.Logger import Logger

SIZE_THRESHOLD = 1024 * 1024


def select_tier(size: int, threshold: int = SIZE_THRESHOLD) -> StorageTier:
    """SMALL iff size <= threshold, LARGE otherwise."""
    return StorageTier.SMALL if size <= threshold else StorageTier.LARGE


class TieringManager:
    """Persists downloaded records into the store chosen by size."""

    def __init__(
        self,
        small_store: Optional[StorageProtocol] = None,
        large_store: Optional[StorageProtocol] = None,
        threshold: int = SIZE_THRESHOLD,
    ) -> None:
        """
        Args:
            small_store: SMALL tier store; defaults to Storage.small() on first use.
            large_store: LARGE tier store; defaults to Storage.large() on first use.
            threshold: Largest size (bytes) that still goes to the SMALL tier.
        """
        self._small = small_store
        self._large = large_store
        self.threshold = threshold

    def store_for(self, tier: StorageTier) -> StorageProtocol:
        """Store for a tier, opening the process-wide handle if none was given."""
        if tier is StorageTier.SMALL:
            if self._small is None:
                from storage.Storage import Storage
                self._small = Storage.small()
            return self._small
        if self._large is None:
            from storage.Storage import Storage
            self._large = Storage.large()
        return self._large

    def select_tier(self, size: int) -> StorageTier:
        return select_tier(size, self.threshold)

    def _undo_put(self, tier: StorageTier, url: str) -> None:
        """Remove a just-written record so the earlier copy in the other tier stays the only one."""
        try:
            self.store_for(tier).delete(url)
        except (StorageError, OSError) as e:
            Logger.error(f"Could not roll back {tier.name} copy of {url}; it is now stored twice: {e}")

    def persist(self, record: FileRecord) -> FileRecord:
        """
        Write a downloaded record to the tier chosen by its size.

        Any record with the same url in the other tier is removed afterwards, so
        the url stays unique across both stores. If that removal fails, the new
        write is rolled back and the earlier copy is kept.

        Args:
            record: Record with payload set; size must equal len(payload).

        Returns:
            The stored record (storage_tier set; SMALL records carry data_url).

        Raises:
            PersistenceError: If encoding or any backend write fails.
        """
        if record.payload is None:
            raise PersistenceError(f"Nothing to save for {record.url}: payload missing")
        if record.size != len(record.payload):
            raise PersistenceError(
                f"Size mismatch for {record.url}: record says {record.size}, payload has {len(record.payload)}"
            )

        tier = self.select_tier(record.size)
        other = StorageTier.LARGE if tier is StorageTier.SMALL else StorageTier.SMALL
        try:
            if tier is StorageTier.SMALL:
                stored = replace(
                    record,
                    storage_tier=tier,
                    data_url=encode_data_url(record.payload, record.content_type),
                    payload=None,
                )
            else:
                stored = replace(record, storage_tier=tier, data_url=None)
            self.store_for(tier).put(stored)
        except (StorageError, ValueError, OSError) as e:
            raise PersistenceError(f"Failed to save {record.file_name}: {e}") from e

        try:
            if self.store_for(other).delete(record.url):
                Logger.info(f"Replaced earlier {other.name} copy of {record.url}")
        except (StorageError, OSError) as e:
            self._undo_put(tier, record.url)
            raise PersistenceError(
                f"Failed to save {record.file_name}: cannot remove earlier {other.name} copy: {e}"
            ) from e

        Logger.info(f"Saved {record.file_name} ({format_file_size(record.size)}) to {tier.name} store")
        return stored
