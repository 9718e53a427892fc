"""
Utilities for file names and sizes.

Provides the human-readable size format used in progress reports and the
catalog, and derives a saved file's name from its URL.
"""

import base64
import locale
import re
import unicodedata
from typing import Tuple
from urllib.parse import unquote, urlparse

KB = 1024
MB = 1024 * 1024


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count in human-readable form (B, KB, MB).

    One decimal place for KB and MB; thresholds at 1024 and 1024**2.

    Args:
        size_bytes: Size in bytes (negative values are treated as 0).

    Returns:
        String like "512 B", "1.5 KB", "3.4 MB".

    Example:
        >>> format_file_size(1536)
        '1.5 KB'
        >>> format_file_size(1_500_000)
        '1.4 MB'
    """
    if size_bytes < 0:
        size_bytes = 0
    if size_bytes < KB:
        return f"{size_bytes} B"
    if size_bytes < MB:
        return f"{size_bytes / KB:.1f} KB"
    return f"{size_bytes / MB:.1f} MB"


def file_name_from_url(url: str) -> str:
    """
    Last path segment of a URL (percent-decoded), or 'download'.

    Example:
        >>> file_name_from_url("https://example.com/media/My%20Song.mp3")
        'My Song.mp3'
    """
    path = urlparse(url).path or ""
    name = path.rstrip("/").split("/")[-1] or "download"
    return unquote(name)


def sanitize_filename(name: str, max_length: int = 100) -> str:
    """
    Make a saved file's name safe to write on any filesystem.

    Example:
        >>> sanitize_filename("a<b>:c.mp3")
        'a_b_c.mp3'
    """
    if not name:
        return "download"
    sanitized = unicodedata.normalize("NFKC", str(name))
    sanitized = re.sub(r'[<>:"/\\|?*]', "_", sanitized)
    sanitized = re.sub(r"[\x00-\x1f\x7f]", "", sanitized)
    sanitized = re.sub(r"_+", "_", sanitized).strip(". ")
    if len(sanitized) > max_length:
        stem, dot, ext = sanitized.rpartition(".")
        if dot and len(ext) < 10:
            sanitized = stem[: max_length - len(ext) - 1] + "." + ext
        else:
            sanitized = sanitized[:max_length]
    return sanitized or "download"


def collation_key(text: str) -> Tuple[str, str, str]:
    """
    Case- and accent-insensitive sort key for names shown to the user.

    Compares the text with accents stripped first, then by the active
    LC_COLLATE order, then by the raw text, so "éclair" sorts beside "eclair"
    even in the C locale.

    Example:
        >>> sorted(["zebra", "Éclair", "fig"], key=collation_key)
        ['Éclair', 'fig', 'zebra']
    """
    folded = text.casefold()
    base = "".join(c for c in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(c))
    return (base, locale.strxfrm(folded), text)


def encode_data_url(payload: bytes, content_type: str) -> str:
    """Encode bytes as a base64 data URL."""
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def decode_data_url(data_url: str) -> bytes:
    """
    Decode a base64 data URL back to bytes.

    Raises:
        ValueError: If the string is not a base64 data URL.
    """
    if not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("Not a data URL")
    header, encoded = data_url.split(",", 1)
    if not header.endswith(";base64"):
        raise ValueError("Data URL is not base64 encoded")
    return base64.b64decode(encoded, validate=True)
