"""Command orchestration for Keyword Downloader."""

from .Orchestrator import MODULES, Orchestrator

__all__ = ["MODULES", "Orchestrator"]
