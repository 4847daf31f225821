"""Extension-based content-type lookup for served assets."""

from __future__ import annotations

from pathlib import PurePath
from typing import Mapping, Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"

DEFAULT_CONTENT_TYPES: Mapping[str, str] = {
    # Documents
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".ts": "application/javascript",
    ".json": "application/json",
    ".map": "application/json",
    ".webmanifest": "application/manifest+json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".pdf": "application/pdf",
    ".wasm": "application/wasm",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".bmp": "image/bmp",
    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    # Media
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}


def file_extension(path: str | PurePath) -> str:
    """Return the lowercase extension of the file name, including the dot."""
    name = PurePath(path).name
    dot = name.rfind(".")
    if dot < 0:
        return ""
    return name[dot:].lower()


def resolve_content_type(
    path: str | PurePath,
    overrides: Optional[Mapping[str, str]] = None,
) -> str:
    """Map a file path to a MIME type: overrides, built-in table, then the default."""
    extension = file_extension(path)
    if not extension:
        return DEFAULT_CONTENT_TYPE

    if overrides:
        override = overrides.get(extension)
        if override:
            return override

    return DEFAULT_CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)
