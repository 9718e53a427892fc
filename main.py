"""
Keyword Downloader - Main entry point.

Search a keyword, download the matching files through the keyword server's
proxy, and keep them in local storage: small files inline in a key/value
store, large files in SQLite.
"""

import locale
import sys

import click

from utils.Args import Args
from utils.Logger import Logger


def setup() -> None:
    """
    Initialize the application: configuration and logging.

    Note: Args must be initialized before Logger since Logger configuration
    comes from Args. Args uses print() for warnings, not Logger, so this order is safe.
    """
    Args.initialize()

    log_level = Args.log_level
    Logger.initialize(log_level=log_level, log_color=bool(Args.log_color))

    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        Logger.warning(f"Cannot use the system collation locale: {e}")

    Logger.debug("Keyword Downloader starting...")
    Logger.debug(f"Python version: {sys.version}")

    if Args.config_file:
        Logger.info(f"Using config file: {Args.config_file}")


def main() -> None:
    """Main entry point for Keyword Downloader."""
    setup()

    from orchestration import Orchestrator

    Orchestrator.run(Args.module)


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise  # Preserve exit code from --help etc.
    except click.ClickException as e:
        print(e.format_message(), file=sys.stderr)
        sys.exit(e.exit_code)
