"""
Catalog of saved files across both storage tiers.

Lists, sorts, views and deletes records wherever they are stored. A tier that
cannot be read is logged and treated as empty so the other tier stays
visible.
"""

from typing import Callable, Dict, List, Optional, Tuple

from catalog.Viewer import Rendering
from storage.FileRecord import FileRecord, StorageTier
from storage.StorageProtocol import StorageProtocol
from utils.Errors import CatalogReadError, PersistenceError, StorageError, record_warning
from utils.file_utils import collation_key, decode_data_url

SORT_KEYS = ("name-asc", "name-desc", "date-asc", "date-desc")

ConfirmCallback = Callable[[str], bool]


def _name_key(record: FileRecord) -> Tuple[str, str, str]:
    """Case- and accent-insensitive collation key for the file name."""
    return collation_key(record.file_name)


def sort_records(records: List[FileRecord], sort_key: str = "name-asc") -> List[FileRecord]:
    """
    Sort records by file name or by last-modified time.

    Raises:
        ValueError: If sort_key is not one of SORT_KEYS.
    """
    if sort_key == "name-asc":
        return sorted(records, key=_name_key)
    if sort_key == "name-desc":
        return sorted(records, key=_name_key, reverse=True)
    if sort_key == "date-asc":
        return sorted(records, key=lambda r: r.last_modified)
    if sort_key == "date-desc":
        return sorted(records, key=lambda r: r.last_modified, reverse=True)
    raise ValueError(f"Unknown sort key {sort_key!r}. Valid: {', '.join(SORT_KEYS)}")


class Catalog:
    """
    Merged view over the SMALL and LARGE stores.

    Stores are given as zero-argument callables so a backend is only opened
    when the catalog first touches it, and an open failure affects only that
    tier.
    """

    def __init__(
        self,
        small_store: Optional[Callable[[], StorageProtocol]] = None,
        large_store: Optional[Callable[[], StorageProtocol]] = None,
    ) -> None:
        if small_store is None or large_store is None:
            from storage.Storage import Storage
            small_store = small_store or Storage.small
            large_store = large_store or Storage.large
        self._stores: Dict[StorageTier, Callable[[], StorageProtocol]] = {
            StorageTier.SMALL: small_store,
            StorageTier.LARGE: large_store,
        }
        self.sort_key = "name-asc"
        self.entries: List[FileRecord] = []

    def _read_tier(self, tier: StorageTier) -> List[FileRecord]:
        """Records of one tier, or [] (with a warning) when it cannot be read."""
        try:
            records = self._stores[tier]().list_records()
        except StorageError as e:
            record_warning(str(CatalogReadError(f"{tier.name} store unavailable: {e}")))
            return []
        for record in records:
            record.storage_tier = tier
        return records

    def list(self, sort_key: Optional[str] = None) -> List[FileRecord]:
        """
        Read both tiers, merge and sort.

        Args:
            sort_key: name-asc, name-desc, date-asc or date-desc. Defaults to the
                last sort key used (initially name-asc).

        Returns:
            Records tagged with their tier, one per url. Payloads of LARGE records
            are not loaded.

        Raises:
            ValueError: If sort_key is not recognized.
        """
        if sort_key is not None:
            if sort_key not in SORT_KEYS:
                raise ValueError(f"Unknown sort key {sort_key!r}. Valid: {', '.join(SORT_KEYS)}")
            self.sort_key = sort_key
        merged: Dict[str, FileRecord] = {}
        for record in self._read_tier(StorageTier.SMALL) + self._read_tier(StorageTier.LARGE):
            earlier = merged.get(record.url)
            if earlier is not None:
                record_warning(f"{record.url} is stored in both tiers; listing the newer copy")
                if earlier.last_modified >= record.last_modified:
                    continue
            merged[record.url] = record
        self.entries = sort_records(list(merged.values()), self.sort_key)
        return self.entries

    def refresh(self) -> List[FileRecord]:
        """Recompute the listing with the current sort key."""
        return self.list()

    def find(self, url: str) -> Optional[FileRecord]:
        """Record for url from a fresh listing, or None."""
        for record in self.refresh():
            if record.url == url:
                return record
        return None

    def view(self, record: FileRecord) -> Rendering:
        """
        Load the bytes of a saved file for display.

        SMALL records are decoded from their inline data URL; LARGE records are
        re-read from the SQLite store.

        Raises:
            CatalogReadError: If the record is gone or cannot be decoded/read.
        """
        tier = record.storage_tier
        if tier is None:
            raise CatalogReadError(f"{record.file_name} has not been saved")
        try:
            if tier is StorageTier.SMALL and record.data_url:
                payload = decode_data_url(record.data_url)
            else:
                stored = self._stores[tier]().get(record.url)
                if stored is None or stored.payload is None:
                    raise CatalogReadError(f"{record.file_name} is no longer saved")
                payload = stored.payload
        except (StorageError, ValueError) as e:
            raise CatalogReadError(f"Cannot read {record.file_name}: {e}") from e
        return Rendering(
            url=record.url,
            file_name=record.file_name,
            content_type=record.content_type,
            payload=payload,
        )

    def delete(self, record: FileRecord, confirm: ConfirmCallback) -> bool:
        """
        Delete a saved file after the user confirms.

        Args:
            record: Record from a listing (storage_tier set).
            confirm: Asked with a prompt; nothing is deleted unless it returns True.

        Returns:
            True if deleted; False if the user declined.

        Raises:
            PersistenceError: If the backend delete fails.
        """
        if not confirm(f"Delete {record.file_name}?"):
            return False
        if record.storage_tier is None:
            raise PersistenceError(f"{record.file_name} has no storage tier")
        try:
            self._stores[record.storage_tier]().delete(record.url)
        except StorageError as e:
            raise PersistenceError(f"Failed to delete {record.file_name}: {e}") from e
        self.refresh()
        return True
