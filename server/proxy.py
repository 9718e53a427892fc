"""
Upstream fetch for the download proxy.

Fetches a known URL with browser-like headers and relays its body chunk by
chunk. The whole fetch is bounded by a deadline: a timeout before the
response starts is reported as a 504 by the route; a timeout or upstream
failure while relaying is raised out of the stream, which aborts the
response so the client sees a failed transfer.
"""

import time
from typing import Dict, Iterator

import requests

from utils.Logger import Logger
from utils.url_utils import BROWSER_HEADERS

RELAY_CHUNK_SIZE = 64 * 1024

# Ask for the identity encoding so the relayed bytes match the upstream Content-Length.
_UPSTREAM_HEADERS: Dict[str, str] = {**BROWSER_HEADERS, "Accept-Encoding": "identity"}


def fetch_upstream(url: str, timeout_sec: float) -> requests.Response:
    """
    Start a streaming GET for url.

    Raises:
        requests.Timeout: Connect or first read exceeded timeout_sec.
        requests.RequestException: Any other request failure.
    """
    return requests.get(
        url,
        stream=True,
        headers=_UPSTREAM_HEADERS,
        timeout=(timeout_sec, timeout_sec),
    )


def relay_headers(resp: requests.Response) -> Dict[str, str]:
    """
    Headers to send back: Content-Type (default octet-stream) and, when the
    body is relayed as received, Content-Length.
    """
    headers = {"Content-Type": resp.headers.get("Content-Type") or "application/octet-stream"}
    encoding = (resp.headers.get("Content-Encoding") or "identity").lower()
    content_length = resp.headers.get("Content-Length")
    if content_length and encoding == "identity":
        headers["Content-Length"] = content_length
    return headers


def relay_body(resp: requests.Response, url: str, deadline: float) -> Iterator[bytes]:
    """
    Yield the upstream body until it ends.

    A stream failure or a passed deadline is raised out of the generator, so
    the server drops the connection without a clean end of body and the
    client sees an incomplete transfer.

    Args:
        resp: Streaming upstream response (closed when the generator finishes).
        url: Upstream URL, for logging.
        deadline: time.monotonic() value after which relaying stops.

    Raises:
        requests.Timeout: The deadline passed while relaying.
        requests.RequestException: The upstream stream failed.
    """
    sent = 0
    try:
        for chunk in resp.iter_content(chunk_size=RELAY_CHUNK_SIZE):
            if time.monotonic() > deadline:
                Logger.error(f"Upstream fetch timed out after {sent} bytes: {url}")
                raise requests.Timeout(f"Upstream fetch exceeded its deadline after {sent} bytes")
            if chunk:
                sent += len(chunk)
                yield chunk
    except requests.Timeout:
        raise
    except requests.RequestException as e:
        Logger.error(f"Upstream stream failed after {sent} bytes: {url}: {e}")
        raise
    finally:
        resp.close()
    Logger.debug(f"Relayed {sent} bytes from {url}")
