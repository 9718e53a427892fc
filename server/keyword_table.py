"""
Keyword-to-URL table served by the keyword API.

Loaded once from a JSON file {keyword: [url, ...]}. The set of all URLs
across all keywords is what the download proxy accepts.

State is process-local; it does not change while the server runs.
"""

import json
import threading
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Union

from utils.Args import Args
from utils.Errors import record_crash
from utils.Logger import Logger


class KeywordTable:
    """Immutable mapping of keywords to URL lists."""

    def __init__(self, keywords: Dict[str, List[str]]) -> None:
        self._keywords = {str(k): [str(u) for u in urls] for k, urls in keywords.items()}
        self._all_urls: FrozenSet[str] = frozenset(
            url for urls in self._keywords.values() for url in urls
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "KeywordTable":
        """
        Load a table from JSON.

        Raises:
            ValueError: If the file is not a JSON object of string lists.
            OSError: If the file cannot be read.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict) or not all(isinstance(v, list) for v in data.values()):
            raise ValueError(f"Keyword file {path} must map keywords to lists of URLs")
        table = cls(data)
        Logger.info(f"Loaded {len(table.keywords())} keywords, {len(table.all_urls)} URLs from {path}")
        return table

    def keywords(self) -> List[str]:
        return list(self._keywords)

    def urls_for(self, keyword: str) -> Optional[List[str]]:
        """URLs for keyword, or None when the keyword is unknown."""
        urls = self._keywords.get(keyword)
        return list(urls) if urls is not None else None

    @property
    def all_urls(self) -> FrozenSet[str]:
        return self._all_urls

    def is_known_url(self, url: str) -> bool:
        return url in self._all_urls


_table: Optional[KeywordTable] = None
_table_lock = threading.Lock()


def get_keyword_table() -> KeywordTable:
    """
    Return the table, loading it from Args.keywords_file on first use.

    Raises:
        RuntimeError: If the keyword file is missing or malformed.
    """
    global _table
    with _table_lock:
        if _table is None:
            path = Args.get("keywords_file")
            try:
                _table = KeywordTable.from_file(path)
            except (OSError, ValueError) as e:
                record_crash(f"Cannot load keyword file {path}: {e}")
        return _table


def set_keyword_table(table: Optional[KeywordTable]) -> None:
    """Replace the table (None forces a reload on next use)."""
    global _table
    with _table_lock:
        _table = table
