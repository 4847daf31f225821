"""Terminal pipeline stage that serves files from a static root."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Mapping, Optional

from .config import CacheControlDirectives, ServeConfig
from .content_types import resolve_content_type
from .headers import build_cache_control_header, format_http_date
from .paths import resolve_asset
from .pipeline import RequestContext

DEFAULT_CHUNK_SIZE = 64 * 1024
NOT_FOUND_BODY = b"not found\n"


class FileStream:
    """Async byte iterator owning an open file handle until closed or exhausted."""

    def __init__(self, handle: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._handle: Optional[BinaryIO] = handle
        self._chunk_size = chunk_size

    @classmethod
    async def open(cls, path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> "FileStream":
        handle = await asyncio.to_thread(open, path, "rb")
        return cls(handle, chunk_size)

    @property
    def closed(self) -> bool:
        return self._handle is None

    def __aiter__(self) -> "FileStream":
        return self

    async def __anext__(self) -> bytes:
        if self._handle is None:
            raise StopAsyncIteration
        try:
            chunk = await asyncio.to_thread(self._handle.read, self._chunk_size)
        except BaseException:
            await self.aclose()
            raise
        if not chunk:
            await self.aclose()
            raise StopAsyncIteration
        return chunk

    async def aclose(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()


class StaticServeHandler:
    """Resolve, describe and stream one static asset per request."""

    def __init__(
        self,
        config: ServeConfig,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("static_serve")

    @property
    def config(self) -> ServeConfig:
        return self._config

    async def __call__(self, context: RequestContext) -> None:
        response = context.response
        asset = await asyncio.to_thread(resolve_asset, self._config.root, context.path)
        if not asset.exists:
            self._not_found(context)
            return

        try:
            stream = await FileStream.open(asset.filesystem_path)
        except FileNotFoundError:
            # Removed between the existence check and the open.
            self._not_found(context)
            return

        response.set_header(
            "Content-Type",
            resolve_content_type(asset.filesystem_path, self._config.content_type_map),
        )

        directives = self._config.cache_control
        if directives is not None and not directives.is_empty:
            response.set_header("Cache-Control", build_cache_control_header(directives))

        if self._config.expires is not None:
            response.set_header("Expires", format_http_date(self._config.expires))

        response.status = 200
        response.stream(stream)

    def _not_found(self, context: RequestContext) -> None:
        self._logger.debug("Static asset not found: %s", context.path)
        context.response.status = 404
        context.response.write(NOT_FOUND_BODY)


def serve_static(
    root: str | Path,
    options: Optional[ServeConfig] = None,
    *,
    content_type_map: Optional[Mapping[str, str]] = None,
    cache_control: Optional[CacheControlDirectives] = None,
    expires: Optional[datetime] = None,
    logger: Optional[logging.Logger] = None,
) -> StaticServeHandler:
    """Build a static handler for `root`, ready for `Pipeline.use`.

    `options` supplies a full `ServeConfig` whose root is replaced by `root`;
    keyword arguments given alongside it override the matching fields.
    """
    overrides = {"root": Path(root)}
    if content_type_map is not None:
        overrides["content_type_map"] = dict(content_type_map)
    if cache_control is not None:
        overrides["cache_control"] = cache_control
    if expires is not None:
        overrides["expires"] = expires

    if options is None:
        config = ServeConfig(**overrides)
    else:
        config = dataclasses.replace(options, **overrides)
    return StaticServeHandler(config, logger=logger)
