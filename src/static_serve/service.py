from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Optional

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from .config import ServerConfig
from .pipeline import Pipeline, RequestContext, ResponseBodyTooLarge


class StaticServer:
    """Threaded asyncio HTTP server feeding every request through a pipeline."""

    def __init__(
        self,
        config: ServerConfig,
        pipeline: Pipeline,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._pipeline = pipeline
        self._logger = logger or logging.getLogger("static_serve")
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._bound_port: Optional[int] = None

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        """Listening port; the OS-assigned one when configured with port 0."""
        if self._bound_port is not None:
            return self._bound_port
        return self._config.port

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("Static server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="static-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(
                f"Static server did not start within {timeout_seconds:.1f}s"
            )

        if self._startup_error is not None:
            raise RuntimeError(f"Static server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "Static server thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._loop = None
        self._stop_async = None
        self._bound_port = None

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:
            self._startup_error = error
            self._logger.error("Static server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            if self._loop is not None:
                pending = asyncio.all_tasks(self._loop)
                for task in pending:
                    task.cancel()
                with contextlib.suppress(Exception):
                    self._loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                self._loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ) as server:
            sockets = list(server.sockets)
            if sockets:
                self._bound_port = sockets[0].getsockname()[1]
            self._logger.info(
                "Static server running at http://%s:%d",
                self._config.host,
                self.port,
            )
            self._started.set()
            await self._stop_async.wait()

    async def _handler(self, websocket: ServerConnection) -> None:
        # Every request is answered in _process_request; upgrades never get here.
        await websocket.close(code=1008, reason="WebSocket not supported")

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response:
        del connection  # Unused for static responses.
        context = RequestContext(path=request.path)
        try:
            await self._pipeline.dispatch(context)
            body = await context.response.read_body(self._config.max_body_bytes)
        except ResponseBodyTooLarge as error:
            self._logger.warning("Refusing %s: %s", context.path, error)
            return self._response(
                500,
                "Internal Server Error",
                Headers(),
                b"response too large\n",
            )
        finally:
            await context.response.aclose()

        response = context.response
        self._logger.debug("GET %s -> %s", context.path, response.status)
        return self._response(
            response.status or 200,
            response.reason_phrase,
            response.headers,
            body,
        )

    @staticmethod
    def _response(
        status_code: int,
        reason_phrase: str,
        headers: Headers,
        body: bytes,
    ) -> Response:
        out = Headers()
        for name, value in headers.raw_items():
            if name.lower() != "content-length":
                out[name] = value
        out["Content-Length"] = str(len(body))
        return Response(status_code, reason_phrase, out, body)
