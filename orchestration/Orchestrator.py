"""
Orchestrator for Keyword Downloader.

Resolves the command from MODULES and runs it with settings from Args.
Operation errors are converted to status text here; only crashes propagate.
"""

from typing import Callable, Dict, List, Optional

import typer

from catalog import SORT_KEYS, Catalog, open_rendering
from client import KeywordClient
from download import DownloadManager, Downloader, DownloadOutcome
from storage import FileRecord, Storage, StorageTier, TieringManager
from utils.Args import Args
from utils.Errors import DownloaderError, record_error
from utils.file_types import URL_SORT_MODES, get_file_icon, sort_urls
from utils.file_utils import format_file_size
from utils.Logger import Logger
from utils.url_utils import is_valid_url

_TIER_BADGES = {StorageTier.SMALL: "LS", StorageTier.LARGE: "IDB"}


def _keyword_client() -> KeywordClient:
    return KeywordClient(Args.server_url, timeout_sec=int(Args.request_timeout_sec))


def _download_manager() -> DownloadManager:
    downloader = Downloader(
        Args.server_url,
        chunk_size=int(Args.chunk_size),
        timeout_sec=int(Args.request_timeout_sec),
    )
    tiering = TieringManager(threshold=int(Args.size_threshold))
    return DownloadManager(downloader, tiering, max_workers=int(Args.max_workers))


def _require_target(what: str) -> Optional[str]:
    target = (Args.target or "").strip()
    if not target:
        typer.echo(f"Missing {what}.", err=True)
        return None
    return target


def _catalog_sort() -> Optional[str]:
    """Args.sort when it is a catalog sort key (search sort keys are ignored)."""
    return Args.sort if Args.sort in SORT_KEYS else None


def format_entry(record: FileRecord) -> str:
    """One catalog line: icon, name, tier badge, size, date."""
    badge = _TIER_BADGES.get(record.storage_tier, "?") if record.storage_tier else "?"
    return (
        f"[{get_file_icon(record.url)}] {record.file_name} [{badge}] "
        f"{format_file_size(record.size)}  {record.last_modified:%Y-%m-%d %H:%M:%S}  {record.url}"
    )


def _print_catalog(records: List[FileRecord]) -> None:
    if not records:
        typer.echo("No files")
        return
    for record in records:
        typer.echo(format_entry(record))


def _noop_run() -> None:
    """No-op command: used for tests and entrypoints that don't need a real command."""
    pass


def _serve_run() -> None:
    from server.app import run_server

    run_server(host=Args.host, port=int(Args.port))


def _keywords_run() -> None:
    try:
        keywords = _keyword_client().all_keywords()
    except DownloaderError as e:
        typer.echo(record_error(None, e), err=True)
        return
    for keyword in keywords:
        typer.echo(keyword)


def _search_run() -> None:
    keyword = _require_target("keyword")
    if keyword is None:
        return
    try:
        urls = _keyword_client().search(keyword)
    except DownloaderError as e:
        typer.echo(record_error(None, e), err=True)
        return
    mode = Args.sort if Args.sort in URL_SORT_MODES else "name-asc"
    for url in sort_urls(urls, mode):
        typer.echo(f"[{get_file_icon(url)}] {url}")


def _download_run() -> None:
    target = _require_target("keyword or URL")
    if target is None:
        return
    if is_valid_url(target):
        urls = [target]
    else:
        try:
            urls = _keyword_client().search(target)
        except DownloaderError as e:
            typer.echo(record_error(None, e), err=True)
            return
    outcomes: List[DownloadOutcome] = _download_manager().run_many(urls)
    for outcome in outcomes:
        typer.echo(f"{outcome.message}  {outcome.url}")
    _print_catalog(Catalog().list(_catalog_sort()))


def _list_run() -> None:
    _print_catalog(Catalog().list(_catalog_sort()))


def _find_saved(catalog: Catalog) -> Optional[FileRecord]:
    url = _require_target("URL of a saved file")
    if url is None:
        return None
    record = catalog.find(url)
    if record is None:
        typer.echo(f"Not saved: {url}", err=True)
    return record


def _view_run() -> None:
    catalog = Catalog()
    record = _find_saved(catalog)
    if record is None:
        return
    try:
        rendering = catalog.view(record)
    except DownloaderError as e:
        typer.echo(record_error(record.url, e), err=True)
        return
    try:
        path = open_rendering(rendering, Args.view_dir, open_browser=bool(Args.open_browser))
    except OSError as e:
        typer.echo(record_error(record.url, e), err=True)
        return
    typer.echo(str(path))


def _delete_run() -> None:
    catalog = Catalog()
    record = _find_saved(catalog)
    if record is None:
        return
    confirm = (lambda _prompt: True) if Args.assume_yes else (lambda prompt: typer.confirm(prompt))
    try:
        deleted = catalog.delete(record, confirm)
    except DownloaderError as e:
        typer.echo(record_error(record.url, e), err=True)
        return
    if deleted:
        Logger.info(f"Deleted {record.file_name}")
        _print_catalog(catalog.entries)


MODULES: Dict[str, Callable[[], None]] = {
    "noop": _noop_run,
    "serve": _serve_run,
    "keywords": _keywords_run,
    "search": _search_run,
    "download": _download_run,
    "list": _list_run,
    "view": _view_run,
    "delete": _delete_run,
}


class Orchestrator:
    """Runs a single command (serve, search, download, list, view, delete)."""

    @classmethod
    def run(cls, module: str) -> None:
        """
        Run the named command.

        Args:
            module: Command name (e.g. "download", "list").

        Raises:
            ValueError: If module is not in MODULES.
        """
        if module not in MODULES:
            valid = ", ".join(sorted(MODULES.keys()))
            raise ValueError(f"Unknown module {module!r}. Valid: {valid}")
        if module != "serve":
            Storage.configure(
                small_path=Args.small_store_path,
                large_path=Args.large_store_path,
                small_capacity=int(Args.small_store_capacity),
            )
        Logger.info(f"Orchestrator running module={module!r}")
        MODULES[module]()
        Logger.info(f"Orchestrator finished module={module!r}")
