"""
Download progress computation and reporting.

A ProgressUpdate is emitted after every chunk. When the proxy declared a
Content-Length, percent is exact; otherwise only the received size is known
and the visual bar fills against an assumed 5 MB ceiling, capped at 95%
until the download finishes.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from utils.file_utils import MB, format_file_size
from utils.Logger import Logger

# Assumed size used to fill the bar when the total is unknown.
UNKNOWN_TOTAL_CEILING = 5_000_000
UNKNOWN_TOTAL_BAR_CAP = 95.0


@dataclass(frozen=True)
class ProgressUpdate:
    """One progress report for a single download."""

    url: str
    received: int
    total: Optional[int]
    percent: Optional[int]
    bar_percent: float
    done: bool = False

    @property
    def received_text(self) -> str:
        return format_file_size(self.received)

    @property
    def total_text(self) -> Optional[str]:
        return format_file_size(self.total) if self.total is not None else None


ProgressCallback = Callable[[ProgressUpdate], None]


def compute_progress(url: str, received: int, total: Optional[int], done: bool = False) -> ProgressUpdate:
    """
    Build the progress update for `received` bytes out of `total` (None if unknown).

    Example:
        >>> compute_progress("u", 512, 1024).percent
        50
        >>> compute_progress("u", 10_000_000, None).bar_percent
        95.0
    """
    if total:
        percent: Optional[int] = min(100, round(received / total * 100))
        bar = float(percent)
    else:
        percent = None
        bar = min(UNKNOWN_TOTAL_BAR_CAP, received / UNKNOWN_TOTAL_CEILING * 100)
    if done:
        bar = 100.0
        if total:
            percent = 100
    return ProgressUpdate(url=url, received=received, total=total, percent=percent, bar_percent=bar, done=done)


class LogProgressReporter:
    """
    Progress callback that logs through Logger.

    Logs at every 10% step when the total is known, or every 1 MB received
    when it is not, plus once on completion. One instance per download.
    """

    def __init__(self, step_percent: int = 10, step_bytes: int = MB) -> None:
        self._step_percent = step_percent
        self._step_bytes = step_bytes
        self._last_mark = 0

    def __call__(self, update: ProgressUpdate) -> None:
        if update.done:
            Logger.info(f"Download complete: {update.received_text}")
            return
        if update.percent is not None:
            mark = update.percent // self._step_percent
            if mark > self._last_mark:
                self._last_mark = mark
                Logger.info(f"Download progress: {update.received_text} / {update.total_text} ({update.percent}%)")
        else:
            mark = update.received // self._step_bytes
            if mark > self._last_mark:
                self._last_mark = mark
                Logger.info(f"Download progress: {update.received_text} received")
