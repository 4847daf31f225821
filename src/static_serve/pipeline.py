"""Minimal request pipeline: ordered async stages sharing a mutable response."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol

from websockets.datastructures import Headers


class ByteStream(Protocol):
    def __aiter__(self) -> AsyncIterator[bytes]: ...

    async def aclose(self) -> None: ...


class ResponseBodyTooLarge(Exception):
    """Raised when a streamed body grows past the allowed size."""


class ResponseContext:
    """Mutable response shared by every stage handling one request."""

    def __init__(self):
        self.status: Optional[int] = None
        self.headers = Headers()
        self._body: bytes = b""
        self._stream: Optional[ByteStream] = None

    @property
    def is_complete(self) -> bool:
        return self.status is not None

    @property
    def reason_phrase(self) -> str:
        try:
            return HTTPStatus(self.status or 200).phrase
        except ValueError:
            return ""

    def set_header(self, name: str, value: str) -> None:
        if name in self.headers:
            del self.headers[name]
        self.headers[name] = value

    def get_header(self, name: str) -> Optional[str]:
        return self.headers.get(name)

    def write(self, body: bytes) -> None:
        self._ensure_no_stream()
        self._body = body

    def stream(self, source: ByteStream) -> None:
        self._ensure_no_stream()
        self._body = b""
        self._stream = source

    async def read_body(self, max_bytes: Optional[int] = None) -> bytes:
        """Drain the body, closing the stream on every exit path."""
        if self._stream is None:
            return self._body
        stream, self._stream = self._stream, None
        chunks = []
        size = 0
        try:
            async for chunk in stream:
                size += len(chunk)
                if max_bytes is not None and size > max_bytes:
                    raise ResponseBodyTooLarge(
                        f"response body exceeds {max_bytes} bytes"
                    )
                chunks.append(chunk)
        finally:
            await stream.aclose()
        self._body = b"".join(chunks)
        return self._body

    async def aclose(self) -> None:
        if self._stream is not None:
            stream, self._stream = self._stream, None
            await stream.aclose()

    def _ensure_no_stream(self) -> None:
        if self._stream is not None:
            raise RuntimeError("response body stream already attached")


@dataclass
class RequestContext:
    path: str
    response: ResponseContext = field(default_factory=ResponseContext)


Stage = Callable[[RequestContext], Awaitable[None]]


class Pipeline:
    """Run registered stages in order until one of them completes the response."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._stages: list[Stage] = []
        self._logger = logger or logging.getLogger("static_serve.pipeline")

    def use(self, stage: Stage) -> "Pipeline":
        self._stages.append(stage)
        return self

    async def dispatch(self, context: RequestContext) -> RequestContext:
        for stage in self._stages:
            await stage(context)
            if context.response.is_complete:
                return context

        self._logger.debug("No stage handled %s", context.path)
        context.response.status = 404
        context.response.write(b"not found\n")
        return context
