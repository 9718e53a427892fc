"""Keyword lookup service and download proxy for Keyword Downloader."""
