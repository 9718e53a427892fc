"""
Storage protocol interface for Keyword Downloader.

Defines the RecordStore protocol that both storage tiers implement, so the
tiering manager and the catalog depend only on this capability.
"""

from pathlib import Path
from typing import List, Optional, Protocol

from storage.FileRecord import FileRecord, StorageTier


class StorageProtocol(Protocol):
    """
    Protocol defining the record store API.

    Records are keyed by url. Every method raises utils.Errors.StorageError
    when the backend cannot be opened, read or written.
    """

    tier: StorageTier

    def initialize(self, path: Optional[Path] = None) -> None:
        """
        Open the backend, creating it if needed. Calling it again is a no-op.

        Args:
            path: Optional path to the backing file.
        """
        ...

    def put(self, record: FileRecord) -> None:
        """
        Write a record with its payload, replacing any record with the same url.

        The write is complete (durable) when this returns.

        Args:
            record: Record with payload set.
        """
        ...

    def get(self, url: str) -> Optional[FileRecord]:
        """
        Get a record with its payload loaded.

        Args:
            url: Record key

        Returns:
            The record, or None if not found
        """
        ...

    def delete(self, url: str) -> bool:
        """
        Delete a record.

        Args:
            url: Record key

        Returns:
            True if a record was deleted, False if none existed
        """
        ...

    def exists(self, url: str) -> bool:
        """Check whether a record with the given url exists."""
        ...

    def list_records(self) -> List[FileRecord]:
        """
        List all readable records tagged with this store's tier.

        Payloads need not be loaded. Unreadable individual entries are skipped.
        """
        ...

    def clear_all_records(self) -> None:
        """Delete every record, keeping the backend itself."""
        ...

    def close(self) -> None:
        """Release the backend handle. initialize() may be called again afterwards."""
        ...
