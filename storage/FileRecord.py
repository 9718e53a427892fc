"""
FileRecord: one downloaded resource, as persisted in either storage tier.

Serialized field names follow the on-disk layout (camelCase) so the stored
JSON/rows match the documented format:
    {url, fileName, contentType, size, lastModified, data | blob, storage}
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StorageTier(str, Enum):
    """Storage backend class a record is routed to. Values are the stored 'storage' labels."""

    SMALL = "localStorage"
    LARGE = "indexedDB"


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (accepts a trailing 'Z'); naive values are taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a 'Z' suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class FileRecord:
    """
    Metadata plus payload for one downloaded resource.

    payload holds raw bytes (fresh downloads and LARGE records that were
    loaded); data_url holds the inline base64 form of SMALL records. A record
    returned by a listing may have neither loaded.
    """

    url: str
    file_name: str
    content_type: str = DEFAULT_CONTENT_TYPE
    size: int = 0
    last_modified: datetime = field(default_factory=utc_now)
    storage_tier: Optional[StorageTier] = None
    payload: Optional[bytes] = field(default=None, repr=False)
    data_url: Optional[str] = field(default=None, repr=False)

    def metadata(self) -> Dict[str, Any]:
        """Serialized metadata fields shared by both tiers."""
        return {
            "url": self.url,
            "fileName": self.file_name,
            "contentType": self.content_type,
            "size": self.size,
            "lastModified": format_timestamp(self.last_modified),
        }

    def without_payload(self) -> "FileRecord":
        """Copy with payload and data URL dropped."""
        return replace(self, payload=None, data_url=None)

    @classmethod
    def from_metadata(
        cls, data: Dict[str, Any], storage_tier: Optional[StorageTier] = None
    ) -> "FileRecord":
        """
        Build a record from serialized metadata.

        Raises:
            KeyError, TypeError, ValueError: If required fields are missing or malformed.
        """
        size = int(data["size"])
        if size < 0:
            raise ValueError(f"Negative size {size}")
        return cls(
            url=str(data["url"]),
            file_name=str(data["fileName"]),
            content_type=str(data.get("contentType") or DEFAULT_CONTENT_TYPE),
            size=size,
            last_modified=parse_timestamp(str(data["lastModified"])),
            storage_tier=storage_tier,
        )
