"""Download package for Keyword Downloader."""

from .DownloadManager import DownloadManager, DownloadOutcome
from .Downloader import Downloader
from .progress import LogProgressReporter, ProgressUpdate, compute_progress

__all__ = [
    "DownloadManager",
    "DownloadOutcome",
    "Downloader",
    "LogProgressReporter",
    "ProgressUpdate",
    "compute_progress",
]
