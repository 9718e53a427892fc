"""
Utilities for URL validation and upstream requests.

Provides the browser-like headers the download proxy sends upstream, and the
helpers that build proxy URLs on the client side.
"""

from typing import Dict
from urllib.parse import urlencode

# Headers to mimic a real browser; some hosts refuse requests without a browser User-Agent.
BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    ),
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}


def is_valid_url(url: str) -> bool:
    """
    Validate that URL is a valid HTTP/HTTPS URL.

    Args:
        url: URL to validate

    Returns:
        True if URL is valid, False otherwise

    Example:
        >>> is_valid_url("https://example.com")
        True
        >>> is_valid_url("not-a-url")
        False
    """
    if not url or not isinstance(url, str):
        return False
    url = url.strip()
    return url.startswith('http://') or url.startswith('https://')


def proxy_download_url(server_url: str, url: str) -> str:
    """
    URL of the proxy endpoint that streams `url`.

    Example:
        >>> proxy_download_url("http://localhost:3000/", "https://a.com/x.mp3")
        'http://localhost:3000/api/download?url=https%3A%2F%2Fa.com%2Fx.mp3'
    """
    return f"{server_url.rstrip('/')}/api/download?{urlencode({'url': url})}"
