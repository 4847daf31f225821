"""Safe mapping of request paths onto files below a static root."""

from __future__ import annotations

import errno
import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

INDEX_FILE = "index.html"
_UNNAMEABLE_ERRNOS = frozenset({errno.ENAMETOOLONG, errno.EINVAL})


@dataclass(frozen=True)
class ResolvedAsset:
    filesystem_path: Path
    exists: bool


def decode_request_path(request_path: str) -> str | None:
    """Return the percent-decoded path, or None when it cannot be decoded."""
    path = request_path.split("?", 1)[0].split("#", 1)[0]
    try:
        decoded = unquote(path, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        return None
    if "\x00" in decoded:
        return None
    return decoded


def _contains(root: Path, candidate: Path) -> bool:
    return candidate == root or root in candidate.parents


def resolve_asset(root: Path, request_path: str) -> ResolvedAsset:
    """Resolve a request path to a regular file inside `root`.

    Directory requests fall back to their `index.html`. Anything that cannot
    be decoded, escapes the root or names no regular file is reported with
    `exists=False`.
    """
    root = Path(root).resolve()
    decoded = decode_request_path(request_path)
    if decoded is None:
        return ResolvedAsset(root, False)

    if decoded.endswith("/") or not decoded:
        decoded = decoded + INDEX_FILE

    # Normalize against a virtual "/" so ".." can never climb above the root.
    normalized = posixpath.normpath("/" + decoded.lstrip("/"))
    relative = normalized.lstrip("/")

    try:
        candidate = (root / relative).resolve()
        if not _contains(root, candidate):
            return ResolvedAsset(candidate, False)

        if candidate.is_dir():
            candidate = candidate / INDEX_FILE

        return ResolvedAsset(candidate, candidate.is_file())
    except OSError as error:
        # Names the filesystem cannot represent never match a file.
        if error.errno in _UNNAMEABLE_ERRNOS:
            return ResolvedAsset(root, False)
        raise
