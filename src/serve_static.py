"""Standalone launcher for the static file server."""

import logging
import signal
import sys
import time
from pathlib import Path

if __package__ is None or __package__ == "":
    sys.path.insert(0, str(Path(__file__).resolve().parent))

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from static_serve import (
    Pipeline,
    RequestContext,
    ServeConfig,
    ServeConfigurationError,
    ServerConfig,
    StaticServeHandler,
    StaticServer,
)


async def close_connection(context: RequestContext) -> None:
    """Ask clients not to reuse the connection; the server answers one request each."""
    context.response.set_header("Connection", "close")


def build_pipeline(config: ServeConfig, logger: logging.Logger) -> Pipeline:
    return (
        Pipeline(logger=logger)
        .use(close_connection)
        .use(StaticServeHandler(config, logger=logger))
    )


def main() -> int:
    """Run the static server process until interrupted."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger("static_serve")

    try:
        app_config = load_app_config(str(resolve_config_path()))
        server_config = ServerConfig.from_settings(app_config.server)
        serve_config = ServeConfig.from_settings(app_config.static)
    except (AppConfigurationError, ServeConfigurationError) as error:
        logger.error("Static server configuration error: %s", error)
        return 1

    server = StaticServer(
        config=server_config,
        pipeline=build_pipeline(serve_config, logger),
        logger=logger,
    )
    logger.info("Serving %s", serve_config.root)

    try:
        server.start()
        logger.info("Press Ctrl+C to stop.")

        shutdown = False

        def handle_signal(signum, frame) -> None:
            del frame
            nonlocal shutdown
            logger.info("Signal %s received, stopping.", signal.Signals(signum).name)
            shutdown = True

        signal.signal(signal.SIGINT, handle_signal)
        signal.signal(signal.SIGTERM, handle_signal)

        while not shutdown:
            time.sleep(0.2)

    except KeyboardInterrupt:
        logger.info("Stopping by user request.")
    finally:
        server.stop()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
