"""
Command line arguments and configuration with singleton pattern.

Provides a centralized configuration accessible via direct attribute access.
Supports both command line arguments and config file values.

Config File Format:
    JSON format with simple key-value pairs.

    Example config.json:
    {
        "log_level": "DEBUG",
        "server_url": "http://127.0.0.1:3000",
        "max_workers": 4
    }

Example usage:
    from utils.Args import Args

    Args.initialize()

    server_url = Args.server_url  # From --server-url, config file, or defaults
    target = Args.target          # Keyword or URL given after the module name

Note: Priority order (highest to lowest):
    1. Command line arguments (from Typer)
    2. Config file values
    3. Default values (from defaults dict)
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer


class ArgsMeta(type):
    """Metaclass to provide direct attribute access to config values."""

    def __getattr__(cls, name: str):
        """Provide attribute access to config values."""
        if not cls._initialized:
            raise RuntimeError("Args has not been initialized. Call Args.initialize() first.")

        if name in cls._config:
            return cls._config[name]

        raise AttributeError(f"Config item '{name}' not found")


class Args(metaclass=ArgsMeta):
    """Args class providing direct attribute access to configuration."""

    # Default values (lowest priority)
    _defaults: Dict[str, Any] = {
        "config_file": None,  # Set from --config when provided
        "module": "noop",
        "target": None,  # Keyword (search/download) or URL (download/view/delete)
        "log_level": "INFO",
        "log_color": False,
        # Client
        "server_url": "http://127.0.0.1:3000",
        "small_store_path": "downloads_small.json",
        "large_store_path": "downloads_large.db",
        "small_store_capacity": 5 * 1024 * 1024,  # characters, like a browser localStorage quota
        "size_threshold": 1024 * 1024,  # SMALL iff size <= threshold
        "max_workers": 4,  # Concurrent downloads
        "chunk_size": 64 * 1024,
        "request_timeout_sec": 60,  # Client read timeout; the proxy enforces its own 30 s limit
        "sort": "name-asc",  # name-asc, name-desc, date-asc, date-desc
        "assume_yes": False,  # Skip delete confirmation
        "view_dir": None,  # Where view writes files; None = temp dir
        "open_browser": True,
        # Server
        "host": "127.0.0.1",
        "port": 3000,
        "keywords_file": str(Path(__file__).resolve().parent.parent / "server" / "data.json"),
        "proxy_timeout_sec": 30,
    }

    _config: Dict[str, Any] = {}
    _initialized: bool = False
    _parsed_args: Dict[str, Any] = {}

    @classmethod
    def initialize(cls, config_file: Optional[Path] = None) -> None:
        """
        Initialize configuration from defaults, config file, and command line args.

        Priority order (highest to lowest):
            1. Command line arguments
            2. Config file values
            3. Default values

        Args:
            config_file: Optional path to config file. If None, uses --config from command line
                or ./config.json when present.
        """
        if cls._initialized:
            return

        cls._config = dict(cls._defaults)

        parsed_args = cls._parse_command_line()

        config_path = config_file or parsed_args.get("config")
        explicit = config_path is not None
        if config_path is None:
            config_path = "./config.json"

        if not isinstance(config_path, Path):
            config_path = Path(config_path)
        if config_path.exists():
            cls._load_config_file(config_path)
        elif explicit:
            # Warn only when a config file was asked for by name
            print(f"Warning: Config file '{config_path}' not found. Using defaults and command line arguments only.",
                  file=sys.stderr)

        cls._apply_command_line_args(parsed_args)

        if "config" in cls._config and cls._config["config"] is not None:
            cls._config["config_file"] = str(cls._config["config"])

        cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Forget all configuration (for testing)."""
        cls._config = {}
        cls._parsed_args = {}
        cls._initialized = False

    @classmethod
    def _parse_command_line(cls) -> Dict[str, Any]:
        """
        Parse command line arguments using Typer.

        Returns:
            Dictionary of parsed command line arguments
        """
        parsed_values: Dict[str, Any] = {}

        def callback(
            module: str = typer.Argument(..., help="Command: noop, serve, keywords, search, download, list, view, delete"),
            target: Optional[str] = typer.Argument(None, help="Keyword (search, download) or URL (download, view, delete)"),
            config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file (JSON format). Default: ./config.json"),
            log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Set the logging level", case_sensitive=False),
            server_url: Optional[str] = typer.Option(None, "--server-url", "-s", help="Base URL of the keyword/proxy server"),
            sort: Optional[str] = typer.Option(None, "--sort", help="Sort order: name-asc, name-desc, date-asc, date-desc (list) or type-asc, type-desc (search)"),
            small_store_path: Optional[Path] = typer.Option(None, "--small-store", help="Path to the JSON store for small files"),
            large_store_path: Optional[Path] = typer.Option(None, "--large-store", help="Path to the SQLite store for large files"),
            max_workers: Optional[int] = typer.Option(None, "--max-workers", "-w", help="Concurrent downloads"),
            host: Optional[str] = typer.Option(None, "--host", help="Server bind address (serve)"),
            port: Optional[int] = typer.Option(None, "--port", "-p", help="Server port (serve)"),
            keywords_file: Optional[Path] = typer.Option(None, "--keywords-file", help="JSON keyword table for the server (serve)"),
            view_dir: Optional[Path] = typer.Option(None, "--view-dir", help="Directory where view writes files"),
            no_browser: bool = typer.Option(False, "--no-browser", help="Write the viewed file but do not open a browser"),
            yes: bool = typer.Option(False, "--yes", "-y", help="Delete without asking for confirmation"),
            log_color: bool = typer.Option(False, "--log-color", help="Color the log severity in terminal. Only applies when stdout is a TTY."),
        ) -> None:
            """Callback to capture Typer parsed values."""
            parsed_values["module"] = module
            if target is not None:
                parsed_values["target"] = target
            if config is not None:
                parsed_values["config"] = config
            if log_level is not None:
                parsed_values["log_level"] = log_level.upper()
            if server_url is not None:
                parsed_values["server_url"] = server_url.rstrip("/")
            if sort is not None:
                parsed_values["sort"] = sort
            if small_store_path is not None:
                parsed_values["small_store_path"] = str(small_store_path)
            if large_store_path is not None:
                parsed_values["large_store_path"] = str(large_store_path)
            if max_workers is not None:
                parsed_values["max_workers"] = max_workers
            if host is not None:
                parsed_values["host"] = host
            if port is not None:
                parsed_values["port"] = port
            if keywords_file is not None:
                parsed_values["keywords_file"] = str(keywords_file)
            if view_dir is not None:
                parsed_values["view_dir"] = str(view_dir)
            if no_browser:
                parsed_values["open_browser"] = False
            if yes:
                parsed_values["assume_yes"] = True
            if log_color:
                parsed_values["log_color"] = True

        # Use a single @app.command() so the first positional (module) is not treated as a
        # subcommand. A Group would require the first token to match a subcommand.
        app = typer.Typer(help="Keyword Downloader - search, download and keep remote files")
        app.command()(callback)

        try:
            app(sys.argv[1:], standalone_mode=False)
        except SystemExit:
            raise  # --help: let SystemExit propagate so the process exits

        # If --help was used, the callback is never invoked and module is missing; exit cleanly.
        if "module" not in parsed_values:
            sys.exit(0)

        return parsed_values

    @classmethod
    def _load_config_file(cls, config_path: Path) -> None:
        """
        Load configuration from JSON file and merge into config.

        Args:
            config_path: Path to the JSON config file
        """
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                cls._config.update(json.load(f))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file '{config_path}': {e}")
        except OSError as e:
            raise IOError(f"Error reading config file '{config_path}': {e}")

    @classmethod
    def _apply_command_line_args(cls, parsed_args: Dict[str, Any]) -> None:
        """
        Apply command line argument values to config, overriding file values and defaults.

        Args:
            parsed_args: Dictionary of parsed command line arguments from Typer
        """
        cls._parsed_args = parsed_args
        for key, value in parsed_args.items():
            if value is not None:
                cls._config[key] = value

    @classmethod
    def get(cls, name: str, default: Any = None) -> Any:
        """
        Return a config value, or default when Args is not initialized or the key is unknown.

        Lets library code (storage, downloader) run standalone, e.g. in tests.
        """
        if not cls._initialized:
            return cls._defaults.get(name, default)
        return cls._config.get(name, default)

    @classmethod
    def get_args(cls) -> Dict[str, Any]:
        """
        Get the parsed command line arguments.

        Returns:
            Dictionary containing all command line arguments that were provided
        """
        if not cls._initialized:
            raise RuntimeError("Args has not been initialized. Call Args.initialize() first.")
        return cls._parsed_args.copy()

    @classmethod
    def get_config(cls) -> Dict[str, Any]:
        """
        Get the full configuration dictionary.

        Returns:
            Dictionary containing all configuration values
        """
        if not cls._initialized:
            raise RuntimeError("Args has not been initialized. Call Args.initialize() first.")
        return cls._config.copy()
