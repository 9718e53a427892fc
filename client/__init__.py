"""Keyword lookup client for Keyword Downloader."""

from .KeywordClient import KeywordClient

__all__ = ["KeywordClient"]
