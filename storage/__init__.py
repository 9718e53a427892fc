"""Storage package for Keyword Downloader."""

from .FileRecord import FileRecord, StorageTier
from .Storage import Storage
from .StorageKeyValue import StorageKeyValue
from .StorageSQLLite import StorageSQLLite
from .TieringManager import TieringManager, select_tier

__all__ = [
    "FileRecord",
    "Storage",
    "StorageKeyValue",
    "StorageSQLLite",
    "StorageTier",
    "TieringManager",
    "select_tier",
]
