"""
Renderable form of a saved file.

A Rendering holds the bytes of a saved file and how to show them: inline
image, audio player, video player, or the raw bytes opened directly.
open_rendering() writes them to disk and opens them in the default browser.
"""

import html
import tempfile
import webbrowser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from utils.file_utils import sanitize_filename
from utils.Logger import Logger

KIND_IMAGE = "image"
KIND_AUDIO = "audio"
KIND_VIDEO = "video"
KIND_RAW = "raw"


def rendering_kind(content_type: str) -> str:
    """image, audio, video or raw, by Content-Type prefix."""
    ct = (content_type or "").lower()
    if ct.startswith("image/"):
        return KIND_IMAGE
    if ct.startswith("audio/"):
        return KIND_AUDIO
    if ct.startswith("video/"):
        return KIND_VIDEO
    return KIND_RAW


@dataclass
class Rendering:
    """Display-ready bytes of one saved file."""

    url: str
    file_name: str
    content_type: str
    payload: bytes = field(repr=False)

    @property
    def kind(self) -> str:
        return rendering_kind(self.content_type)

    @property
    def is_inline(self) -> bool:
        return self.kind != KIND_RAW

    def to_html(self, src: str) -> Optional[str]:
        """
        Markup that shows the file from `src`, or None for raw files (opened directly).
        """
        src = html.escape(src, quote=True)
        if self.kind == KIND_IMAGE:
            return f'<img src="{src}" style="max-width:90%;max-height:90%;"/>'
        if self.kind == KIND_AUDIO:
            return f'<audio controls src="{src}"></audio>'
        if self.kind == KIND_VIDEO:
            return f'<video controls src="{src}" style="max-width:100%"></video>'
        return None


def open_rendering(rendering: Rendering, directory: Optional[Path] = None, open_browser: bool = True) -> Path:
    """
    Write the rendering to disk and optionally open it in the default browser.

    Inline kinds get an HTML page wrapping the file; raw files are opened as is.

    Args:
        rendering: What to show.
        directory: Output directory; a new temp directory when None.
        open_browser: If False, only write the files.

    Returns:
        Path of the page (inline kinds) or of the file itself (raw).
    """
    out_dir = Path(directory) if directory else Path(tempfile.mkdtemp(prefix="keyword-downloader-"))
    out_dir.mkdir(parents=True, exist_ok=True)
    file_path = out_dir / sanitize_filename(rendering.file_name)
    file_path.write_bytes(rendering.payload)

    target = file_path
    markup = rendering.to_html(file_path.name)
    if markup is not None:
        target = out_dir / f"{file_path.stem}.view.html"
        title = html.escape(rendering.file_name)
        target.write_text(
            f"<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\"><title>{title}</title></head>"
            f"<body>{markup}</body></html>\n",
            encoding="utf-8",
        )

    Logger.info(f"Wrote {rendering.file_name} to {target}")
    if open_browser:
        webbrowser.open(target.resolve().as_uri())
    return target
