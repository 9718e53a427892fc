"""
Coarse content categories for resource URLs.

Used to pick an icon for a search result or saved file and to sort search
results by type.
"""

from typing import Dict, List

from utils.file_utils import collation_key

_EXTENSION_TYPES: Dict[str, str] = {
    "mp3": "audio",
    "wav": "audio",
    "ogg": "audio",
    "mp4": "video",
    "mov": "video",
    "avi": "video",
    "pdf": "pdf",
    "jpg": "image",
    "jpeg": "image",
    "png": "image",
    "gif": "image",
    "webp": "image",
}

_TYPE_ICONS: Dict[str, str] = {
    "audio": "music-note",
    "video": "camera-video",
    "pdf": "file-earmark-pdf",
    "image": "image",
}

DEFAULT_ICON = "file-earmark"

URL_SORT_MODES = ("name-asc", "name-desc", "type-asc", "type-desc")


def get_extension(url: str) -> str:
    """Substring after the final '.', lower-cased; '' when there is no dot."""
    if "." not in url:
        return ""
    return url.rsplit(".", 1)[-1].lower()


def get_file_type(url: str) -> str:
    """
    Map a URL to audio, video, pdf, image or other by its extension.

    Example:
        >>> get_file_type("https://example.com/a/Track.MP3")
        'audio'
        >>> get_file_type("https://example.com/readme")
        'other'
    """
    return _EXTENSION_TYPES.get(get_extension(url), "other")


def get_file_icon(url: str) -> str:
    """Icon name for the URL's category."""
    return _TYPE_ICONS.get(get_file_type(url), DEFAULT_ICON)


def sort_urls(urls: List[str], mode: str = "name-asc") -> List[str]:
    """
    Return search result URLs sorted by name or by type.

    Args:
        urls: URLs from a keyword search.
        mode: name-asc, name-desc, type-asc or type-desc. Type sorts are stable.

    Raises:
        ValueError: If mode is not recognized.
    """
    if mode == "name-asc":
        return sorted(urls, key=collation_key)
    if mode == "name-desc":
        return sorted(urls, key=collation_key, reverse=True)
    if mode == "type-asc":
        return sorted(urls, key=get_file_type)
    if mode == "type-desc":
        return sorted(urls, key=get_file_type, reverse=True)
    raise ValueError(f"Unknown sort mode {mode!r}. Valid: {', '.join(URL_SORT_MODES)}")
