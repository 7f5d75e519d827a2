"""Process entry point.

    python -m taskboard.server

Runs the API under uvicorn. SIGINT/SIGTERM trigger a graceful shutdown
through the application lifespan. An exception that escapes the event loop
takes the same shutdown path and the process then exits with status 1.
"""
import asyncio
import logging
import sys
from typing import Any, Dict, List

import uvicorn

from taskboard.application import Application
from taskboard.config import Settings, settings
from taskboard.logging_config import configure_logging
from taskboard.main import create_app

logger = logging.getLogger(__name__)


def build_server(config: Settings, application: Application) -> uvicorn.Server:
    server_config = uvicorn.Config(
        create_app(application),
        host=config.HOST,
        port=config.PORT,
        log_config=None,
        timeout_graceful_shutdown=config.SERVER_SHUTDOWN_TIMEOUT_SECONDS,
    )
    return uvicorn.Server(server_config)


def run(config: Settings = settings) -> int:
    configure_logging(config.log_level)
    application = Application(config)
    server = build_server(config, application)
    failures: List[Dict[str, Any]] = []

    def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        failures.append(context)
        logger.critical(
            "Unrecoverable error: %s",
            context.get("message", "unhandled exception"),
            exc_info=context.get("exception"),
        )
        server.should_exit = True

    async def serve() -> None:
        asyncio.get_running_loop().set_exception_handler(handle_loop_exception)
        await server.serve()

    try:
        asyncio.run(serve())
    except Exception:
        logger.exception("Server crashed")
        return 1

    if failures or not server.started:
        logger.error("%s exited after a failure", config.APP_NAME)
        return 1
    logger.info("%s stopped", config.APP_NAME)
    return 0


if __name__ == "__main__":
    sys.exit(run())
