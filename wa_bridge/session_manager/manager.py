"""Session Manager HTTP service.

Wires the WhatsApp Web client to the session mirror and the reconnect
policy, and serves the mirror's state over HTTP.

Endpoints:
    GET  /          - Liveness text
    GET  /health    - ok/ready/authenticated/auth_failure
    GET  /status    - health fields plus last disconnect and QR availability
    GET  /qr        - Pending QR code as a PNG data URL ("" when none)
    GET  /chats     - Chat listing proxied to WhatsApp Web
    GET  /static/*  - Files from the public directory
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from aiohttp import web

from ..config import (
    AUTH_TIMEOUT_SECONDS,
    BROWSER_HEADLESS,
    BROWSER_TIMEOUT,
    CLEAN_PROFILE_LOCKS,
    EXECUTABLE_PATH,
    PROFILE_DIR,
    PUBLIC_DIR,
    QR_MAX_RETRIES,
    RECONNECT_DELAY_SECONDS,
    WATCH_INTERVAL_SECONDS,
)
from ..constants import (
    EVENT_AUTH_FAILURE,
    EVENT_AUTHENTICATED,
    EVENT_DISCONNECTED,
    EVENT_QR,
    EVENT_READY,
    ROOT_MESSAGE,
)
from ..models.chat import ChatSummary
from ..models.events import AuthFailed, Authenticated, Disconnected, QrIssued, Ready
from .browser import WhatsAppWebClient
from .mirror import SessionMirror
from .profile import cleanup_profile_locks, ensure_profile_dir, resolve_executable_path
from .reconnect import ReconnectScheduler

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the chat client, the session mirror and the reconnect policy."""

    def __init__(
        self,
        client,
        mirror: Optional[SessionMirror] = None,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        profile_dir: Optional[Path] = None,
        clean_locks: bool = False,
    ):
        self.client = client
        self.mirror = mirror or SessionMirror()
        self.profile_dir = profile_dir
        self.clean_locks = clean_locks and profile_dir is not None
        self.reconnector = ReconnectScheduler(
            self.client.initialize,
            delay=reconnect_delay,
            before_attempt=self.clear_locks if self.clean_locks else None,
        )
        self._init_task: Optional[asyncio.Task] = None
        self._closed = False

        self.mirror.add_disconnect_listener(self._on_disconnected)
        self.client.on(EVENT_QR, self._on_qr)
        self.client.on(EVENT_READY, self._on_ready)
        self.client.on(EVENT_AUTHENTICATED, self._on_authenticated)
        self.client.on(EVENT_AUTH_FAILURE, self._on_auth_failure)
        self.client.on(EVENT_DISCONNECTED, self._on_client_disconnected)

    # ── Client events -> mirror ──────────────────────────────────────────────

    async def _on_qr(self, code: str):
        await self.mirror.dispatch(QrIssued(code=code))

    async def _on_ready(self):
        await self.mirror.dispatch(Ready())

    async def _on_authenticated(self):
        await self.mirror.dispatch(Authenticated())

    async def _on_auth_failure(self, reason: Optional[str] = None):
        await self.mirror.dispatch(AuthFailed(reason=reason))

    async def _on_client_disconnected(self, reason: Optional[str] = None):
        await self.mirror.dispatch(Disconnected(reason=reason))

    async def _on_disconnected(self, event: Disconnected):
        if self._closed:
            return
        self.reconnector.schedule()

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def clear_locks(self):
        cleanup_profile_locks(self.profile_dir)

    async def setup(self):
        self.mirror.start()

    def start_client(self) -> asyncio.Task:
        """Start client initialization in the background."""
        if self.clean_locks:
            self.clear_locks()
        self._init_task = asyncio.create_task(self._initialize_client(), name="client-init")
        return self._init_task

    async def _initialize_client(self):
        try:
            await self.client.initialize()
            logger.info("WhatsApp client initialized.")
        except Exception as e:
            logger.error(f"Error initializing client: {e}", exc_info=True)

    async def cleanup(self):
        """Cancel pending work and destroy the client. Never raises."""
        if self._closed:
            return
        self._closed = True

        await self.reconnector.cancel()

        if self._init_task is not None and not self._init_task.done():
            self._init_task.cancel()
            try:
                await self._init_task
            except asyncio.CancelledError:
                pass

        try:
            await self.client.destroy()
        except Exception as e:
            logger.warning(f"Error destroying client: {e}")

        await self.mirror.stop()
        # destroy() can emit a late disconnect
        await self.reconnector.cancel()


def build_manager() -> SessionManager:
    """Create a SessionManager around a browser client from configuration."""
    executable_path = resolve_executable_path(EXECUTABLE_PATH)
    ensure_profile_dir(PROFILE_DIR)

    client = WhatsAppWebClient(
        profile_dir=PROFILE_DIR,
        executable_path=executable_path,
        headless=BROWSER_HEADLESS,
        timeout=BROWSER_TIMEOUT,
        auth_timeout=AUTH_TIMEOUT_SECONDS,
        qr_max_retries=QR_MAX_RETRIES,
        watch_interval=WATCH_INTERVAL_SECONDS,
    )
    return SessionManager(
        client,
        reconnect_delay=RECONNECT_DELAY_SECONDS,
        profile_dir=PROFILE_DIR,
        clean_locks=CLEAN_PROFILE_LOCKS,
    )


# ── HTTP Handlers ────────────────────────────────────────────────────────────


async def handle_index(request: web.Request) -> web.Response:
    return web.Response(text=ROOT_MESSAGE)


async def handle_health(request: web.Request) -> web.Response:
    mgr: SessionManager = request.app["manager"]
    return web.json_response(mgr.mirror.snapshot().health())


async def handle_status(request: web.Request) -> web.Response:
    mgr: SessionManager = request.app["manager"]
    return web.json_response(mgr.mirror.snapshot().status())


async def handle_qr(request: web.Request) -> web.Response:
    mgr: SessionManager = request.app["manager"]
    state = mgr.mirror.snapshot()
    return web.json_response({"qr": state.last_qr or ""})


async def handle_chats(request: web.Request) -> web.Response:
    mgr: SessionManager = request.app["manager"]

    try:
        chats = await mgr.client.get_chats()
        return web.json_response(
            [ChatSummary.from_raw(chat).to_wire() for chat in chats if ChatSummary.raw_id(chat)]
        )
    except Exception as e:
        logger.error(f"Chat listing failed: {e}", exc_info=True)
        return web.json_response({"error": str(e)}, status=500)


# ── App Factory ──────────────────────────────────────────────────────────────


async def on_startup(app: web.Application):
    if "manager" not in app:
        app["manager"] = build_manager()
    mgr: SessionManager = app["manager"]
    await mgr.setup()


async def on_cleanup(app: web.Application):
    mgr: SessionManager = app["manager"]
    await mgr.cleanup()
    logger.info("Session Manager stopped.")


def create_app(
    manager: Optional[SessionManager] = None,
    public_dir: Optional[Path] = PUBLIC_DIR,
) -> web.Application:
    app = web.Application()
    if manager is not None:
        app["manager"] = manager
    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    app.router.add_get("/", handle_index)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/status", handle_status)
    app.router.add_get("/qr", handle_qr)
    app.router.add_get("/chats", handle_chats)

    if public_dir is not None and public_dir.is_dir():
        app.router.add_static("/static", public_dir)

    return app
