"""
Process-wide storage handles for Keyword Downloader.

Holds one store per tier. Each store is created and opened lazily on first
access; there is no explicit teardown since both backends persist on disk.
Paths and implementations come from Args when it is initialized, otherwise
from Args defaults, unless configure() was called first.

Example usage:
    from storage import Storage

    Storage.configure(small_path="small.json", large_path="large.db")  # optional
    small = Storage.small()           # StorageKeyValue, opened on first call
    large = Storage.large()           # StorageSQLLite, opened on first call
    store = Storage.for_tier(StorageTier.LARGE)

    # For testing: close and forget the handles
    Storage.reset()
"""

import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from storage.FileRecord import StorageTier
from storage.StorageProtocol import StorageProtocol
from utils.Args import Args


class Storage:
    """
    Lazily-opened store handles, one per tier.

    Storage is a singleton registry - use the class methods directly.
    """

    _instances: Dict[StorageTier, StorageProtocol] = {}
    _lock = threading.Lock()
    _overrides: Dict[str, Any] = {}

    # Registry mapping class names to their module paths
    _implementations = {
        'StorageKeyValue': 'storage.StorageKeyValue.StorageKeyValue',
        'StorageSQLLite': 'storage.StorageSQLLite.StorageSQLLite',
    }

    _tier_settings = {
        StorageTier.SMALL: ("small_store_implementation", "StorageKeyValue", "small_store_path"),
        StorageTier.LARGE: ("large_store_implementation", "StorageSQLLite", "large_store_path"),
    }

    @classmethod
    def configure(
        cls,
        small_path: Optional[Union[str, Path]] = None,
        large_path: Optional[Union[str, Path]] = None,
        small_capacity: Optional[int] = None,
    ) -> None:
        """
        Override paths (and the small store capacity) used when stores are first opened.

        Has no effect on stores that are already open; call reset() first.
        """
        if small_path is not None:
            cls._overrides["small_store_path"] = str(small_path)
        if large_path is not None:
            cls._overrides["large_store_path"] = str(large_path)
        if small_capacity is not None:
            cls._overrides["small_store_capacity"] = small_capacity

    @classmethod
    def _setting(cls, name: str, default: Any = None) -> Any:
        if name in cls._overrides:
            return cls._overrides[name]
        return Args.get(name, default)

    @classmethod
    def create(cls, implementation: str, **kwargs: Any) -> StorageProtocol:
        """
        Instantiate a store implementation by class name (not opened).

        Raises:
            ValueError: If implementation name is not recognized
            ImportError: If the implementation class cannot be imported
        """
        if implementation not in cls._implementations:
            raise ValueError(
                f"Unknown storage implementation: {implementation}. "
                f"Available implementations: {', '.join(cls._implementations.keys())}"
            )

        module_path = cls._implementations[implementation]
        module_name, class_name = module_path.rsplit('.', 1)

        try:
            module = __import__(module_name, fromlist=[class_name])
            implementation_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ImportError(
                f"Failed to import storage implementation '{implementation}': {e}"
            ) from e

        return implementation_class(**kwargs)

    @classmethod
    def for_tier(cls, tier: StorageTier) -> StorageProtocol:
        """
        Return the open store for a tier, creating and opening it on first access.

        Raises:
            StorageError: If the backend cannot be opened (the next call retries).
        """
        with cls._lock:
            instance = cls._instances.get(tier)
            if instance is not None:
                return instance

            impl_key, impl_default, path_key = cls._tier_settings[tier]
            implementation = cls._setting(impl_key, impl_default)
            kwargs: Dict[str, Any] = {}
            if tier is StorageTier.SMALL:
                capacity = cls._setting("small_store_capacity")
                if capacity is not None:
                    kwargs["capacity"] = int(capacity)
            instance = cls.create(implementation, **kwargs)
            path = cls._setting(path_key)
            instance.initialize(Path(path) if path else None)
            cls._instances[tier] = instance
            return instance

    @classmethod
    def small(cls) -> StorageProtocol:
        """Store for records up to the size threshold."""
        return cls.for_tier(StorageTier.SMALL)

    @classmethod
    def large(cls) -> StorageProtocol:
        """Store for records above the size threshold."""
        return cls.for_tier(StorageTier.LARGE)

    @classmethod
    def reset(cls) -> None:
        """
        Close and forget all store handles and overrides (for testing).
        """
        with cls._lock:
            for instance in cls._instances.values():
                instance.close()
            cls._instances = {}
            cls._overrides = {}
