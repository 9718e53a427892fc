"""Utility modules for Keyword Downloader."""

from .Args import Args
from .Logger import Logger

__all__ = ["Args", "Logger"]
