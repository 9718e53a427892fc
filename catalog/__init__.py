"""Catalog package for Keyword Downloader."""

from .Catalog import SORT_KEYS, Catalog, sort_records
from .Viewer import Rendering, open_rendering, rendering_kind

__all__ = ["SORT_KEYS", "Catalog", "Rendering", "open_rendering", "rendering_kind", "sort_records"]
