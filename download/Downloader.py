"""
Streaming download through the keyword server's proxy.

Requests /api/download?url=..., reads the body chunk by chunk with a running
byte counter, reports progress after every chunk, and assembles a FileRecord
from the complete payload. One attempt only; failures raise TransferError.
"""

from typing import List, Optional

import requests

from download.progress import ProgressCallback, compute_progress
from storage.FileRecord import DEFAULT_CONTENT_TYPE, FileRecord, utc_now
from utils.Errors import TransferError, TransferTimeoutError
from utils.file_utils import file_name_from_url, format_file_size
from utils.Logger import Logger
from utils.url_utils import proxy_download_url

DEFAULT_CHUNK_SIZE = 64 * 1024


def _declared_length(resp: requests.Response) -> Optional[int]:
    """Content-Length as int, or None when absent or malformed."""
    value = resp.headers.get("Content-Length")
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None


def _error_detail(resp: requests.Response) -> str:
    """Error text from a JSON error body ({error, details}), or ''."""
    try:
        body = resp.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    parts = [str(body[k]) for k in ("error", "details") if body.get(k)]
    return " - ".join(parts)


class Downloader:
    """
    Downloads one URL at a time through the proxy.

    Holds no per-download state, so one instance may serve concurrent downloads.
    """

    def __init__(
        self,
        server_url: str,
        session: Optional[requests.Session] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout_sec: int = 60,
    ) -> None:
        """
        Args:
            server_url: Base URL of the keyword/proxy server.
            session: Optional requests.Session (uses requests.get if None).
            chunk_size: Bytes per read.
            timeout_sec: Connect and per-read timeout.
        """
        self.server_url = server_url.rstrip("/")
        self._session = session
        self.chunk_size = chunk_size
        self.timeout_sec = timeout_sec

    def download(self, url: str, progress_callback: Optional[ProgressCallback] = None) -> FileRecord:
        """
        Download url through the proxy.

        Args:
            url: Resource URL (must be one returned by a keyword search).
            progress_callback: Optional callback(ProgressUpdate), called after each
                chunk and once more when the stream ends.

        Returns:
            FileRecord with payload set; storage_tier is None until persisted.

        Raises:
            TransferError: Non-success status, connection or stream failure.
            TransferTimeoutError: The proxy timed out fetching the resource (504).
        """
        get = (self._session or requests).get
        try:
            resp = get(
                proxy_download_url(self.server_url, url),
                stream=True,
                timeout=(self.timeout_sec, self.timeout_sec),
            )
        except requests.RequestException as e:
            raise TransferError(f"Request failed: {e}") from e

        with resp:
            if not resp.ok:
                detail = _error_detail(resp)
                message = f"Server: {resp.status_code}" + (f" ({detail})" if detail else "")
                if resp.status_code == 504:
                    raise TransferTimeoutError(message, status_code=resp.status_code)
                raise TransferError(message, status_code=resp.status_code)

            total = _declared_length(resp)
            content_type = resp.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
            if total is not None:
                Logger.debug(f"Declared size {format_file_size(total)}")

            chunks: List[bytes] = []
            received = 0
            try:
                for chunk in resp.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    chunks.append(chunk)
                    received += len(chunk)
                    if progress_callback:
                        progress_callback(compute_progress(url, received, total))
            except requests.RequestException as e:
                raise TransferError(f"Stream interrupted after {format_file_size(received)}: {e}") from e

        payload = b"".join(chunks)
        if progress_callback:
            progress_callback(compute_progress(url, len(payload), total, done=True))
        if total is not None and total != len(payload):
            Logger.warning(f"Declared length {total} differs from received {len(payload)} bytes")

        return FileRecord(
            url=url,
            file_name=file_name_from_url(url),
            content_type=content_type,
            size=len(payload),
            last_modified=utc_now(),
            payload=payload,
        )
