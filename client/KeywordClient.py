"""
Client for the keyword lookup service.

Serves: GET /api/all-keywords and POST /api/keywords. A blank keyword is
rejected locally, before any request is made.
"""

from typing import List, Optional

import requests

from utils.Errors import KeywordLookupError
from utils.Logger import Logger


class KeywordClient:
    """Looks up resource URLs for a keyword on the keyword server."""

    def __init__(self, server_url: str, session: Optional[requests.Session] = None, timeout_sec: int = 30) -> None:
        self.server_url = server_url.rstrip("/")
        self._session = session
        self.timeout_sec = timeout_sec

    def _http(self):
        return self._session or requests

    def all_keywords(self) -> List[str]:
        """
        Return every keyword the server knows.

        Raises:
            KeywordLookupError: If the server cannot be reached or answers with an error.
        """
        try:
            resp = self._http().get(f"{self.server_url}/api/all-keywords", timeout=self.timeout_sec)
        except requests.RequestException as e:
            raise KeywordLookupError(f"Could not load keywords: {e}") from e
        if not resp.ok:
            raise KeywordLookupError(f"Could not load keywords (status {resp.status_code})")
        return list(resp.json().get("keywords", []))

    def search(self, keyword: str) -> List[str]:
        """
        Return the URLs registered for keyword.

        Args:
            keyword: Keyword to look up; surrounding whitespace is ignored.

        Raises:
            KeywordLookupError: If the keyword is blank (no request is made), unknown,
                or the server cannot be reached.
        """
        keyword = (keyword or "").strip()
        if not keyword:
            raise KeywordLookupError("Enter a keyword")
        try:
            resp = self._http().post(
                f"{self.server_url}/api/keywords",
                json={"keyword": keyword},
                timeout=self.timeout_sec,
            )
        except requests.RequestException as e:
            raise KeywordLookupError(f"Search failed: {e}") from e
        if not resp.ok:
            try:
                error = resp.json().get("error")
            except ValueError:
                error = None
            raise KeywordLookupError(error or "No URLs for this keyword")
        urls = list(resp.json().get("urls", []))
        Logger.info(f"Keyword {keyword!r}: {len(urls)} URL(s)")
        return urls
