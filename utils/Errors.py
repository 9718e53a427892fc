"""
Shared error/warning reporting for Keyword Downloader.

Failure domains:
- KeywordLookupError: missing or unknown keyword; the user corrects the input.
- TransferError: the proxy answered with a non-success status, the upstream
  fetch failed, or the stream broke. TransferTimeoutError is the 504 case.
- PersistenceError: the payload arrived but could not be encoded or written.
- CatalogReadError: one backend could not be read while listing or viewing.
- StorageError: raised by the storage backends themselves; converted to
  PersistenceError or CatalogReadError at the operation boundary.

A "crash" stops the run. An "error" ends the current operation (one download,
one view) and is shown to the user as status text. A "warning" is non-fatal.
Nothing is retried automatically.
"""

from __future__ import annotations

from typing import NoReturn, Optional

from utils.Logger import Logger


class DownloaderError(Exception):
    """Base class for all Keyword Downloader failures."""


class KeywordLookupError(DownloaderError):
    """Keyword missing, unknown, or the lookup service could not be reached."""


class TransferError(DownloaderError):
    """Download through the proxy failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransferTimeoutError(TransferError):
    """The proxy gave up on the upstream fetch (HTTP 504)."""


class PersistenceError(DownloaderError):
    """Payload was downloaded but could not be saved."""


class CatalogReadError(DownloaderError):
    """A storage backend could not be read."""


class StorageError(DownloaderError):
    """Low-level storage backend failure (open, read, write, capacity)."""


def record_crash(msg: str) -> NoReturn:
    """
    Record a crash: log at exception level and raise so the run stops.

    Use for unrecoverable failures (e.g. config missing, server cannot start).

    Args:
        msg: Crash message to log and raise.

    Raises:
        RuntimeError: Always, with the given message.
    """
    Logger.exception(msg)
    raise RuntimeError(msg)


def status_text(error: Exception) -> str:
    """
    Convert an error to the status text shown for one download.

    Transfer and persistence failures get different prefixes so
    "download failed" and "downloaded but not saved" are never confused.
    """
    if isinstance(error, PersistenceError):
        return f"Downloaded but not saved: {error}"
    if isinstance(error, TransferTimeoutError):
        return f"Download timed out: {error}"
    if isinstance(error, TransferError):
        return f"Download failed: {error}"
    if isinstance(error, KeywordLookupError):
        return f"Search failed: {error}"
    if isinstance(error, CatalogReadError):
        return f"Could not read saved files: {error}"
    return f"Error: {error}"


def record_error(url: Optional[str], error: Exception) -> str:
    """
    Record an error for one operation: log it and return the user-visible status text.

    Args:
        url: URL the operation was working on, or None.
        error: The exception that ended the operation.

    Returns:
        Status text (see status_text()).
    """
    text = status_text(error)
    if url:
        Logger.error(f"{text} ({url})")
    else:
        Logger.error(text)
    return text


def record_warning(warning_msg: str) -> None:
    """
    Record a warning: non-fatal, processing continues.

    Args:
        warning_msg: Warning message to log.
    """
    Logger.warning(warning_msg)
