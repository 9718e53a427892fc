"""
Download-then-save jobs, one per URL, run concurrently.

Each job downloads through the proxy, then hands the record to the tiering
manager. Errors end only that job and become its status message; transfer
and save failures are reported differently.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

from download.Downloader import Downloader
from download.progress import LogProgressReporter, ProgressCallback
from storage.FileRecord import FileRecord
from storage.TieringManager import TieringManager
from utils.Errors import PersistenceError, TransferError, record_error
from utils.Logger import Logger

STATUS_SAVED = "saved"
STATUS_TRANSFER_FAILED = "transfer_failed"
STATUS_PERSIST_FAILED = "persist_failed"


@dataclass
class DownloadOutcome:
    """Result of one download-and-save job."""

    url: str
    status: str
    message: str
    record: Optional[FileRecord] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SAVED


class DownloadManager:
    """Runs download-and-save jobs with isolated progress state."""

    def __init__(
        self,
        downloader: Downloader,
        tiering: TieringManager,
        max_workers: int = 4,
    ) -> None:
        self._downloader = downloader
        self._tiering = tiering
        self.max_workers = max(1, int(max_workers or 1))

    def run(self, url: str, progress_callback: Optional[ProgressCallback] = None) -> DownloadOutcome:
        """
        Download url and save it. Never raises for transfer or save failures.

        Returns:
            DownloadOutcome with status saved, transfer_failed or persist_failed.
        """
        Logger.set_current_url(url)
        try:
            try:
                record = self._downloader.download(url, progress_callback)
            except TransferError as e:
                return DownloadOutcome(url, STATUS_TRANSFER_FAILED, record_error(url, e))
            try:
                stored = self._tiering.persist(record)
            except PersistenceError as e:
                return DownloadOutcome(url, STATUS_PERSIST_FAILED, record_error(url, e), record=record.without_payload())
            return DownloadOutcome(url, STATUS_SAVED, "Saved!", record=stored.without_payload())
        finally:
            Logger.clear_current_url()

    def run_many(
        self,
        urls: List[str],
        progress_factory: Optional[Callable[[str], Optional[ProgressCallback]]] = None,
    ) -> List[DownloadOutcome]:
        """
        Run one job per URL, up to max_workers at a time.

        Args:
            urls: URLs to download.
            progress_factory: Called once per URL to create that download's own
                progress callback. Defaults to a LogProgressReporter per URL.

        Returns:
            Outcomes in the same order as urls.
        """
        if progress_factory is None:
            progress_factory = lambda _url: LogProgressReporter()

        if self.max_workers <= 1 or len(urls) <= 1:
            outcomes = [self.run(url, progress_factory(url)) for url in urls]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(self.run, url, progress_factory(url)) for url in urls]
                outcomes = [future.result() for future in futures]

        saved = sum(1 for o in outcomes if o.ok)
        Logger.info(f"Downloads complete: {saved} saved, {len(outcomes) - saved} failed")
        return outcomes
