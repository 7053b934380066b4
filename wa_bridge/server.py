"""Service entry point for the WhatsApp Web bridge.

Opens the HTTP listener first and starts the WhatsApp client in the
background, so /health answers (ready=false) while the browser warms up.
SIGTERM/SIGINT destroy the client, close the listener and exit.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from aiohttp import web
from aiohttp.web import AppRunner, TCPSite

from .config import HOST, LOG_DIR, LOG_LEVEL, PORT, ensure_dirs
from .session_manager.manager import SessionManager, create_app

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

logger = logging.getLogger("wa-bridge")


def configure_logging():
    ensure_dirs()
    file_handler = RotatingFileHandler(
        LOG_DIR / "wa_bridge.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(stream=sys.stderr, level=LOG_LEVEL, format=LOG_FORMAT)
    logging.getLogger().addHandler(file_handler)


def _log_async_fault(loop: asyncio.AbstractEventLoop, context: dict):
    # Log only; the service keeps running.
    exc = context.get("exception")
    logger.error(f"Unhandled async fault: {context.get('message')}", exc_info=exc)


async def serve(
    host: str = HOST,
    port: int = PORT,
    app: Optional[web.Application] = None,
    stop: Optional[asyncio.Event] = None,
):
    """Serve until SIGTERM/SIGINT, or until ``stop`` is set."""
    loop = asyncio.get_running_loop()
    loop.set_exception_handler(_log_async_fault)

    if app is None:
        app = create_app()
    runner = AppRunner(app)
    await runner.setup()
    site = TCPSite(runner, host, port)
    await site.start()
    logger.info(f"WhatsApp service listening on {host}:{port}")

    mgr: SessionManager = app["manager"]
    mgr.start_client()

    if stop is None:
        stop = asyncio.Event()
    signals = []
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, stop.set)
            signals.append(sig)
        except (NotImplementedError, RuntimeError):
            # Windows, or not on the main thread: KeyboardInterrupt still ends asyncio.run()
            pass

    try:
        await stop.wait()
    finally:
        logger.info("Shutting down WhatsApp service...")
        await mgr.cleanup()
        await runner.cleanup()
        for sig in signals:
            loop.remove_signal_handler(sig)
        logger.info("WhatsApp service stopped.")


def main():
    """Run the bridge as a standalone HTTP service."""
    configure_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
